"""
Monte Carlo diagnostics for weighted sampling.

Priority sampling gives no closed form for the inclusion probability of a
record when k > 1, so the sampler is checked empirically: repeat the draw
under different seeds, count how often each record is included and compare
groups of records with different weights.
"""

from collections import Counter
from typing import Any, Callable, Dict, Hashable, Iterable, Optional, Tuple, Union
import numpy as np
import pandas as pd
from scipy.stats import norm

from wrsample.priority.merge import reduce_partition_results
from wrsample.priority.sampler import scan_partitions
from wrsample.priority.slots import is_placeholder


def estimate_inclusion_frequencies(
    partitions: Iterable[Iterable[Any]],
    weight: Union[str, Callable[[Any], Any]],
    k: int,
    num_trials: int,
    seed: int = 0,
    key: Optional[Callable[[Any], Hashable]] = None,
    replace: bool = False,
    merge: str = "global",
) -> pd.Series:
    """
    Estimate each record's inclusion probability by repeated sampling.

    Parameters
    ----------
    partitions : iterable of iterables
        The partitioned records. Materialized once and reused every trial.
    weight : str or callable
        Weight field name or accessor.
    k : int
        Sample size of each trial.
    num_trials : int
        Number of independent draws.
    seed : int, default=0
        Base seed. Trial t uses seed + t * num_partitions, so the partition
        streams of different trials never coincide.
    key : callable, optional
        Maps a record to its label in the result. Labels must be unique.
        If None, records are labelled by (partition_index, position).
    replace : bool, default=False
        Sample with replacement; a record counts once per trial however
        many times it was drawn.
    merge : str, default='global'
        Merge rule for sampling without replacement.

    Returns
    -------
    pd.Series
        Fraction of trials that included each record, for every record of
        the population (0.0 for records never drawn). Named
        'inclusion_frequency'.

    Examples
    --------
    >>> parts = [[{"id": i, "w": 1.0 if i < 5 else 100.0} for i in range(10)]]
    >>> freq = estimate_inclusion_frequencies(
    ...     parts, "w", k=2, num_trials=1000, seed=1, key=lambda r: r["id"]
    ... )
    >>> bool(freq.loc[5:].mean() > freq.loc[:4].mean())
    True
    """
    if num_trials < 1:
        raise ValueError(f"num_trials must be >= 1, got {num_trials}")

    materialized = [list(records) for records in partitions]
    num_partitions = max(len(materialized), 1)

    labels: Dict[Tuple[int, int], Hashable] = {}
    for partition_index, records in enumerate(materialized):
        for position, record in enumerate(records):
            labels[(partition_index, position)] = (
                key(record) if key is not None else (partition_index, position)
            )
    if len(set(labels.values())) != len(labels):
        raise ValueError("key must map every record to a unique label")

    counts: Counter = Counter()
    strategy = "slotwise" if replace else merge
    for trial in range(num_trials):
        if k == 0 or not materialized:
            break
        trial_seed = seed + trial * num_partitions
        results = scan_partitions(materialized, weight, k, trial_seed, replace=replace)
        merged = reduce_partition_results(results, k, strategy=strategy)
        counts.update({slot.origin for slot in merged if not is_placeholder(slot)})

    frequencies = pd.Series(
        [counts[origin] / num_trials for origin in labels],
        index=list(labels.values()),
        name="inclusion_frequency",
        dtype=float,
    )
    return frequencies


def inclusion_confidence_interval(
    frequency: Union[float, np.ndarray, pd.Series],
    num_trials: int,
    alpha: float = 0.05,
) -> Tuple[Any, Any]:
    """
    Wilson score interval for an empirical inclusion frequency.

    Parameters
    ----------
    frequency : float or array-like
        Observed inclusion frequency (successes / num_trials).
    num_trials : int
        Number of trials behind the frequency.
    alpha : float, default=0.05
        Significance level; the interval has coverage 1 - alpha.

    Returns
    -------
    tuple
        (lower, upper) bounds, same shape as ``frequency``.

    Notes
    -----
    With z = Z^{-1}(1 - alpha/2) and n trials:

        center = (p + z^2 / 2n) / (1 + z^2 / n)
        half   = z * sqrt(p (1 - p) / n + z^2 / 4n^2) / (1 + z^2 / n)

    Unlike the normal approximation, the Wilson interval stays inside
    [0, 1] and is usable for frequencies near 0 or 1.
    """
    if num_trials < 1:
        raise ValueError(f"num_trials must be >= 1, got {num_trials}")
    if not 0 < alpha < 1:
        raise ValueError(f"alpha must be in (0, 1), got {alpha}")

    p = np.asarray(frequency, dtype=float)
    z = norm.ppf(1 - alpha / 2)
    n = float(num_trials)

    denominator = 1 + z**2 / n
    center = (p + z**2 / (2 * n)) / denominator
    half_width = z * np.sqrt(p * (1 - p) / n + z**2 / (4 * n**2)) / denominator

    lower = np.clip(center - half_width, 0.0, 1.0)
    upper = np.clip(center + half_width, 0.0, 1.0)

    if isinstance(frequency, pd.Series):
        return (
            pd.Series(lower, index=frequency.index, name="lower"),
            pd.Series(upper, index=frequency.index, name="upper"),
        )
    if p.ndim == 0:
        return float(lower), float(upper)
    return lower, upper


def compare_group_inclusion(
    frequencies: pd.Series,
    groups: Union[pd.Series, Dict[Hashable, Hashable]],
    num_trials: Optional[int] = None,
    alpha: float = 0.05,
) -> pd.DataFrame:
    """
    Summarize inclusion frequencies per group of records.

    Parameters
    ----------
    frequencies : pd.Series
        Output of estimate_inclusion_frequencies().
    groups : pd.Series or dict
        Group label of every record, indexed like ``frequencies``.
    num_trials : int, optional
        If given, adds Wilson bounds on each group's mean frequency.
    alpha : float, default=0.05
        Significance level of the bounds.

    Returns
    -------
    pd.DataFrame
        Indexed by group, with columns:
        - 'num_records': Records in the group
        - 'mean_inclusion': Mean inclusion frequency
        - 'ci_lower', 'ci_upper': Bounds (only with num_trials)

    Examples
    --------
    >>> freq = pd.Series([0.01, 0.02, 0.49, 0.48], index=[0, 1, 2, 3])
    >>> groups = {0: "low", 1: "low", 2: "high", 3: "high"}
    >>> summary = compare_group_inclusion(freq, groups, num_trials=1000)
    >>> list(summary.columns)
    ['num_records', 'mean_inclusion', 'ci_lower', 'ci_upper']
    """
    group_labels = pd.Series(groups).reindex(frequencies.index)
    if group_labels.isna().any():
        missing = list(group_labels[group_labels.isna()].index)
        raise ValueError(f"No group given for records: {missing}")

    grouped = frequencies.groupby(group_labels)
    summary = pd.DataFrame(
        {
            "num_records": grouped.size(),
            "mean_inclusion": grouped.mean(),
        }
    )

    if num_trials is not None:
        lower, upper = inclusion_confidence_interval(
            summary["mean_inclusion"], num_trials, alpha=alpha
        )
        summary["ci_lower"] = lower
        summary["ci_upper"] = upper

    return summary
