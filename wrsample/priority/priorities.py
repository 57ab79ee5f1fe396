"""
Sampling priorities for weighted sampling without replacement.

Each candidate with weight w > 0 receives the priority ln(u) / w where
u ~ Uniform[0, 1). Keeping the k largest priorities is equivalent to the
A-ES algorithm, which keeps the k largest keys u^(1/w); the logarithm
avoids underflow of u^(1/w) for small weights.

Randomness is never taken from global state: every partition owns a
generator seeded from (seed + partition_index).

Reference: Efraimidis & Spirakis (2006), Section 3 (Algorithm A-ES)
"""

import math
import numbers
import sys
from typing import Union
import numpy as np

_SEED_MODULUS = 2**64

# Most negative finite priority. ln(u) / w overflows to -inf for tiny weights,
# which would make a real candidate look like an empty slot.
LOWEST_PRIORITY = -sys.float_info.max


def derive_partition_seed(seed: int, partition_index: int) -> int:
    """
    Derive the seed of a partition's random source.

    Parameters
    ----------
    seed : int
        Caller supplied seed. May be negative.
    partition_index : int
        Zero-based index of the partition.

    Returns
    -------
    int
        (seed + partition_index) reduced modulo 2**64, a valid numpy seed.

    Examples
    --------
    >>> derive_partition_seed(42, 3)
    45
    >>> derive_partition_seed(-1, 0)
    18446744073709551615
    """
    return (int(seed) + int(partition_index)) % _SEED_MODULUS


def partition_rng(seed: int, partition_index: int) -> np.random.Generator:
    """
    Build the random source of one partition.

    Two calls with the same arguments return generators that produce the
    same stream, and the stream of a partition does not depend on any
    other partition.

    Parameters
    ----------
    seed : int
        Caller supplied seed.
    partition_index : int
        Zero-based index of the partition.

    Returns
    -------
    np.random.Generator
        A PCG64 generator.
    """
    return np.random.default_rng(derive_partition_seed(seed, partition_index))


def draw_uniform(rng: np.random.Generator) -> float:
    """
    Draw u ~ Uniform[0, 1), redrawing exact zeros.

    ln(0) is -inf, which would collide with the empty-slot priority, so a
    zero draw is discarded and replaced by the next value of the stream.
    """
    u = rng.random()
    while u == 0.0:
        u = rng.random()
    return float(u)


def coerce_weight(value) -> float:
    """
    Validate a weight read from a record and convert it to float.

    Parameters
    ----------
    value : Any
        Raw weight value.

    Returns
    -------
    float
        The weight. NaN is passed through (and is never eligible).

    Raises
    ------
    TypeError
        If the value is not a real number. Booleans are rejected.
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise TypeError(
            f"Sampling weight must be a real number, got {type(value).__name__}: {value!r}"
        )
    return float(value)


def is_eligible(weight: float) -> bool:
    """A record takes part in sampling only if its weight is > 0."""
    return weight > 0


def generate_sample_priority(weight: float, rng: np.random.Generator) -> float:
    """
    Generate the sampling priority of one candidate.

    Parameters
    ----------
    weight : float
        Sampling weight, must be > 0.
    rng : np.random.Generator
        Random source of the candidate's partition.

    Returns
    -------
    float
        ln(u) / weight, always <= 0. Larger weights push the priority
        towards zero on average; an infinite weight yields -0.0. Values
        that overflow to -inf (tiny weights) are clamped to LOWEST_PRIORITY
        so they still rank above empty slots.

    Examples
    --------
    >>> rng = partition_rng(42, 0)
    >>> priority = generate_sample_priority(2.0, rng)
    >>> priority <= 0
    True
    """
    if not weight > 0:
        raise ValueError(f"weight must be positive, got {weight}")
    return max(math.log(draw_uniform(rng)) / weight, LOWEST_PRIORITY)


def generate_sample_priorities(
    weights: Union[np.ndarray, list],
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Vectorized priority generation for an array of positive weights.

    Parameters
    ----------
    weights : array-like of float
        Positive sampling weights.
    rng : np.random.Generator
        Random source of the partition.

    Returns
    -------
    np.ndarray
        One priority per weight, in input order, clamped to
        LOWEST_PRIORITY like generate_sample_priority().
    """
    weights = np.asarray(weights, dtype=float)
    if weights.size and not np.all(weights > 0):
        raise ValueError("all weights must be positive")

    uniforms = rng.random(weights.shape[0])
    zero_mask = uniforms == 0.0
    while zero_mask.any():
        uniforms[zero_mask] = rng.random(int(zero_mask.sum()))
        zero_mask = uniforms == 0.0

    with np.errstate(over="ignore"):
        priorities = np.log(uniforms) / weights
    return np.maximum(priorities, LOWEST_PRIORITY)
