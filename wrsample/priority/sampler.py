"""
Distributed weighted sampling over partitioned records.

The sample is computed in two phases:

1. Map: every partition is scanned independently with its own random
   source (seed + partition_index) and produces k sample slots.
2. Reduce: the partition results are merged pairwise into k slots and the
   records of the filled slots are returned.

Partitions share no state, so the map phase can run in worker processes.

Reference: Efraimidis & Spirakis (2006), Algorithm A-ES
"""

import logging
import warnings
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Union

from wrsample.priority.merge import (
    extract_payloads,
    get_merge_function,
    reduce_partition_results,
)
from wrsample.priority.partition import (
    resolve_weight_accessor,
    scan_partition,
    scan_partition_with_replacement,
)
from wrsample.priority.priorities import partition_rng
from wrsample.priority.slots import SampleSlot, is_placeholder
from wrsample.utils.logging import get_logger

if TYPE_CHECKING:
    from wrsample.utils.config import SamplingConfig

logger = get_logger(__name__)

WeightArg = Union[str, Callable[[Any], Any]]


def validate_sampling_arguments(k: int, seed: int, num_threads: int = 1) -> None:
    """Check the sample size, seed and worker count shared by all samplers."""
    if isinstance(k, bool) or not isinstance(k, int):
        raise TypeError(f"k must be an integer, got {type(k).__name__}")
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise TypeError(f"seed must be an integer, got {type(seed).__name__}")
    if num_threads < 1:
        raise ValueError(f"num_threads must be >= 1, got {num_threads}")


def _scan_indexed_partition(
    indexed_partition,
    weight_of: Callable[[Any], Any],
    k: int,
    seed: int,
    replace: bool,
) -> List[SampleSlot]:
    # Worker entry point; module level so it pickles.
    partition_index, records = indexed_partition
    scan = scan_partition_with_replacement if replace else scan_partition
    return scan(
        records,
        weight_of,
        k,
        partition_rng(seed, partition_index),
        partition_index=partition_index,
    )


def scan_partitions(
    partitions: Iterable[Iterable[Any]],
    weight: WeightArg,
    k: int,
    seed: int,
    replace: bool = False,
    num_threads: int = 1,
) -> List[List[SampleSlot]]:
    """
    Run the map phase: scan each partition into k sample slots.

    Parameters
    ----------
    partitions : iterable of iterables
        The partitioned records. Partition i is the i-th item.
    weight : str or callable
        Weight field name or accessor.
    k : int
        Number of slots per partition.
    seed : int
        Base seed; partition i uses seed + i.
    replace : bool, default=False
        Use independent per-slot races (sampling with replacement).
    num_threads : int, default=1
        Worker processes. With more than one, partitions (materialized)
        and the weight accessor must be picklable.

    Returns
    -------
    List[List[SampleSlot]]
        One slot array per partition, in partition order.

    Notes
    -----
    Exposed for callers that run partitions on their own executor and
    merge the results with reduce_partition_results().
    """
    validate_sampling_arguments(k, seed, num_threads)
    weight_of = resolve_weight_accessor(weight)

    process_func = partial(
        _scan_indexed_partition,
        weight_of=weight_of,
        k=k,
        seed=seed,
        replace=replace,
    )

    if num_threads == 1:
        results = [process_func(item) for item in enumerate(partitions)]
    else:
        indexed = [(index, list(records)) for index, records in enumerate(partitions)]
        if not indexed:
            return []
        if num_threads > len(indexed):
            warnings.warn(
                f"num_threads={num_threads} exceeds the number of partitions "
                f"({len(indexed)}); extra workers stay idle",
                RuntimeWarning,
            )
        with ProcessPoolExecutor(max_workers=min(num_threads, len(indexed))) as executor:
            results = list(executor.map(process_func, indexed))

    if logger.isEnabledFor(logging.DEBUG):
        for index, slots in enumerate(results):
            filled = sum(1 for slot in slots if not is_placeholder(slot))
            logger.debug("partition %d: %d of %d slots filled", index, filled, k)

    return results


def sample_without_replacement(
    partitions: Iterable[Iterable[Any]],
    weight: WeightArg,
    k: int,
    seed: int,
    merge: str = "global",
    num_threads: int = 1,
) -> List[Any]:
    """
    Draw a weighted sample of k distinct records from partitioned data.

    Every record with weight w > 0 receives the priority ln(u) / w with
    u ~ Uniform[0, 1); the k records with the highest priorities form the
    sample (priority sampling, A-ES). Records with weight <= 0 (or NaN)
    are never sampled.

    Parameters
    ----------
    partitions : iterable of iterables
        The partitioned records. Partitioning is owned by the caller.
    weight : str or callable
        Weight field name, or a function record -> weight. A missing field
        or a non-numeric weight raises.
    k : int
        Requested sample size, >= 0.
    seed : int
        Base seed. Partition i draws from a generator seeded with seed + i,
        so the same seed and partitioning always return the same sample.
    merge : str, default='global'
        How partition results are combined:
        - 'global': concatenate and re-select the global top-k (exact).
        - 'slotwise': compare same-index slots only. Can under-select
          when the best candidates are concentrated in one partition.
    num_threads : int, default=1
        Worker processes for the partition scans.

    Returns
    -------
    List[Any]
        At most k records, best priority first. Fewer than k are returned
        when fewer than k records are eligible.

    Raises
    ------
    ValueError
        If k < 0 or the merge strategy is unknown.
    TypeError
        If k or seed is not an integer, or a weight is not a real number.

    Notes
    -----
    With k = 0 the partitions are not iterated and no weight is read.

    The per-record inclusion probability increases with weight; for k = 1
    it is exactly w_i / sum(w).

    References
    ----------
    Efraimidis, P. S., & Spirakis, P. G. (2006). Weighted random sampling
    with a reservoir. Information Processing Letters, 97(5), 181-185.

    Examples
    --------
    >>> partitions = [
    ...     [{"w": 1.0, "id": 1}, {"w": 1.0, "id": 2}],
    ...     [{"w": 1.0, "id": 3}],
    ... ]
    >>> sample = sample_without_replacement(partitions, "w", k=2, seed=42)
    >>> len({row["id"] for row in sample})
    2
    """
    validate_sampling_arguments(k, seed, num_threads)
    get_merge_function(merge)
    if k == 0:
        return []

    results = scan_partitions(partitions, weight, k, seed, num_threads=num_threads)
    if not results:
        logger.debug("no partitions to sample from")
        return []

    logger.debug("merging %d partition results with '%s' merge", len(results), merge)
    sample = extract_payloads(reduce_partition_results(results, k, strategy=merge))
    if len(sample) < k:
        logger.info("only %d eligible records for a sample of %d", len(sample), k)
    return sample


def sample_with_replacement(
    partitions: Iterable[Iterable[Any]],
    weight: WeightArg,
    k: int,
    seed: int,
    num_threads: int = 1,
) -> List[Any]:
    """
    Draw k independent weighted draws (with replacement) from partitioned data.

    Each of the k slots runs its own exponential race: every eligible
    record draws a fresh priority for every slot and the slot keeps the
    highest. Slot j holds record i with probability w_i / sum(w).

    Parameters
    ----------
    partitions : iterable of iterables
        The partitioned records.
    weight : str or callable
        Weight field name or accessor.
    k : int
        Number of draws, >= 0.
    seed : int
        Base seed; partition i uses seed + i.
    num_threads : int, default=1
        Worker processes for the partition scans.

    Returns
    -------
    List[Any]
        Exactly k records (repeats possible) if any record is eligible,
        otherwise an empty list.

    Notes
    -----
    Slots are independent races, so merging partition results slot by
    slot is exact here. Cost is O(n * k) random draws.
    """
    validate_sampling_arguments(k, seed, num_threads)
    if k == 0:
        return []

    results = scan_partitions(
        partitions, weight, k, seed, replace=True, num_threads=num_threads
    )
    if not results:
        return []

    return extract_payloads(reduce_partition_results(results, k, strategy="slotwise"))


def sample_from_config(
    partitions: Iterable[Iterable[Any]],
    config: "SamplingConfig",
    weight: WeightArg = None,
) -> List[Any]:
    """
    Sample according to a SamplingConfig.

    Parameters
    ----------
    partitions : iterable of iterables
        The partitioned records.
    config : SamplingConfig
        Run parameters.
    weight : str or callable, optional
        Overrides ``config.weight``.

    Returns
    -------
    List[Any]
        The sampled records.
    """
    config.validate()
    weight = weight if weight is not None else config.weight
    if weight is None:
        raise ValueError("No weight given: set 'weight' in the config or pass it")

    if config.replace:
        return sample_with_replacement(
            partitions, weight, config.k, config.seed, num_threads=config.num_threads
        )
    return sample_without_replacement(
        partitions,
        weight,
        config.k,
        config.seed,
        merge=config.merge,
        num_threads=config.num_threads,
    )
