"""
Weighted sampling of pandas DataFrames.

A DataFrame is split into contiguous row partitions (or the caller supplies
its own list of partition frames). Each partition is scanned with vectorized
priority generation, and the merged result is returned as a DataFrame of
the sampled rows with their original index.
"""

from typing import List, Sequence
import pandas as pd
import numpy as np

from wrsample.priority.merge import (
    extract_payloads,
    get_merge_function,
    reduce_partition_results,
)
from wrsample.priority.priorities import generate_sample_priorities, partition_rng
from wrsample.priority.sampler import validate_sampling_arguments
from wrsample.priority.slots import SampleSlot, empty_slots, sort_slots
from wrsample.utils.logging import get_logger

logger = get_logger(__name__)


def split_frame(frame: pd.DataFrame, num_partitions: int) -> List[pd.DataFrame]:
    """
    Split a DataFrame into contiguous, order-preserving row partitions.

    Parameters
    ----------
    frame : pd.DataFrame
        Data to split.
    num_partitions : int
        Number of partitions. Partitions differ in size by at most one row;
        trailing partitions may be empty when there are fewer rows than
        partitions.

    Returns
    -------
    List[pd.DataFrame]
        The partitions, in row order.

    Examples
    --------
    >>> df = pd.DataFrame({"w": range(5)})
    >>> [len(part) for part in split_frame(df, 2)]
    [3, 2]
    """
    if num_partitions < 1:
        raise ValueError(f"num_partitions must be >= 1, got {num_partitions}")
    bounds = np.array_split(np.arange(len(frame)), num_partitions)
    return [frame.iloc[positions] for positions in bounds]


def _weight_array(frame: pd.DataFrame, weight_column: str) -> np.ndarray:
    if weight_column not in frame.columns:
        raise ValueError(f"DataFrame must contain weight column '{weight_column}'")
    column = frame[weight_column]
    if pd.api.types.is_bool_dtype(column) or not pd.api.types.is_numeric_dtype(column):
        raise TypeError(
            f"Weight column '{weight_column}' must be numeric, got dtype {column.dtype}"
        )
    return column.to_numpy(dtype=float, na_value=np.nan)


def scan_weight_array(
    weights: np.ndarray,
    k: int,
    rng: np.random.Generator,
    partition_index: int = 0,
    replace: bool = False,
) -> List[SampleSlot]:
    """
    Vectorized partition scan over an array of weights.

    Parameters
    ----------
    weights : np.ndarray
        Weights of the partition's rows, in row order.
    k : int
        Number of slots.
    rng : np.random.Generator
        Random source of this partition.
    partition_index : int, default=0
        Index of the partition.
    replace : bool, default=False
        If True, run k independent races (one priority per row and slot,
        drawn in the same order as scan_partition_with_replacement()).
        Uses O(n * k) memory for n eligible rows.

    Returns
    -------
    List[SampleSlot]
        k slots whose payloads are row positions within the partition.
        Without replacement the slots are ordered best rank first; with
        replacement slot j is draw j.
    """
    if k <= 0:
        return []

    weights = np.asarray(weights, dtype=float)
    # NaN compares False, so NaN weights are dropped here too.
    eligible_positions = np.flatnonzero(weights > 0)
    if eligible_positions.size == 0:
        return empty_slots(k)

    eligible_weights = weights[eligible_positions]

    if replace:
        # Row-major (n_eligible, k) draws consume the stream record by record,
        # slot by slot, like scan_partition_with_replacement().
        priorities = generate_sample_priorities(
            np.repeat(eligible_weights, k), rng
        ).reshape(eligible_weights.size, k)
        # argmax returns the first maximum, i.e. the earliest position.
        best_rows = np.argmax(priorities, axis=0)
        slots = []
        for slot_index, row in enumerate(best_rows):
            position = int(eligible_positions[row])
            slots.append(
                SampleSlot(
                    float(priorities[row, slot_index]),
                    position,
                    (partition_index, position),
                )
            )
        return slots

    priorities = generate_sample_priorities(eligible_weights, rng)
    if priorities.size > k:
        keep = np.argpartition(-priorities, k - 1)[:k]
    else:
        keep = np.arange(priorities.size)

    slots = sort_slots(
        [
            SampleSlot(
                float(priorities[i]),
                int(eligible_positions[i]),
                (partition_index, int(eligible_positions[i])),
            )
            for i in keep
        ]
    )
    return slots + empty_slots(k - len(slots))


def sample_partitioned_frames(
    frames: Sequence[pd.DataFrame],
    weight_column: str,
    k: int,
    seed: int,
    replace: bool = False,
    merge: str = "global",
) -> pd.DataFrame:
    """
    Weighted sample of rows from caller-partitioned DataFrames.

    Parameters
    ----------
    frames : sequence of pd.DataFrame
        The partitions; all must share the weight column.
    weight_column : str
        Name of the numeric weight column.
    k : int
        Sample size, >= 0.
    seed : int
        Base seed; partition i uses seed + i.
    replace : bool, default=False
        Sample with replacement (rows may repeat).
    merge : str, default='global'
        Merge rule for sampling without replacement.

    Returns
    -------
    pd.DataFrame
        The sampled rows with their original index, best priority first.
        Has the columns of the first partition; empty if nothing could be
        sampled.

    Raises
    ------
    ValueError
        If k < 0, the merge strategy is unknown or the weight column is
        missing.
    TypeError
        If k or seed is not an integer, or the weight column is not
        numeric.
    """
    validate_sampling_arguments(k, seed)
    get_merge_function(merge)
    frames = list(frames)
    if k == 0 or not frames:
        return frames[0].iloc[0:0] if frames else pd.DataFrame()

    offsets = np.cumsum([0] + [len(frame) for frame in frames])
    results = []
    for partition_index, frame in enumerate(frames):
        weights = _weight_array(frame, weight_column)
        slots = scan_weight_array(
            weights, k, partition_rng(seed, partition_index), partition_index, replace
        )
        # Re-key payloads as positions in the concatenated frame.
        offset = int(offsets[partition_index])
        results.append(
            [
                SampleSlot(slot.priority, slot.payload + offset, slot.origin)
                if slot.payload is not None
                else slot
                for slot in slots
            ]
        )

    strategy = "slotwise" if replace else merge
    positions = extract_payloads(reduce_partition_results(results, k, strategy=strategy))
    logger.debug(
        "sampled %d of %d requested rows from %d partitions",
        len(positions),
        k,
        len(frames),
    )

    combined = pd.concat(frames) if len(frames) > 1 else frames[0]
    return combined.iloc[positions]


def sample_frame(
    frame: pd.DataFrame,
    weight_column: str,
    k: int,
    seed: int,
    num_partitions: int = 1,
    replace: bool = False,
    merge: str = "global",
) -> pd.DataFrame:
    """
    Weighted sample of k rows from a DataFrame.

    The frame is split into ``num_partitions`` contiguous partitions, each
    scanned independently, mirroring how the sample is computed on a
    partitioned table.

    Parameters
    ----------
    frame : pd.DataFrame
        Data to sample from.
    weight_column : str
        Name of the numeric weight column. Rows with weight <= 0 or NaN are
        never sampled.
    k : int
        Sample size, >= 0.
    seed : int
        Base seed.
    num_partitions : int, default=1
        Number of partitions the frame is split into.
    replace : bool, default=False
        Sample with replacement.
    merge : str, default='global'
        Merge rule for sampling without replacement.

    Returns
    -------
    pd.DataFrame
        Sampled rows (original index kept), best priority first.

    Examples
    --------
    >>> df = pd.DataFrame({"id": range(10), "score": np.arange(10.0)})
    >>> sample = sample_frame(df, "score", k=3, seed=42, num_partitions=2)
    >>> len(sample)
    3
    >>> bool((sample["score"] > 0).all())
    True
    """
    if weight_column not in frame.columns:
        raise ValueError(f"DataFrame must contain weight column '{weight_column}'")
    return sample_partitioned_frames(
        split_frame(frame, num_partitions),
        weight_column,
        k,
        seed,
        replace=replace,
        merge=merge,
    )
