"""
Partition-local scans for distributed priority sampling.

Each partition is scanned once, in partition order, with its own random
source. The scan keeps the k best candidates seen so far and returns them
as a fixed-size list of sample slots ordered best rank first.

Reference: Efraimidis & Spirakis (2006); the per-partition map step
follows the mapPartitionsWithIndex pattern of row-oriented engines.
"""

import heapq
from typing import Any, Callable, Iterable, List, Tuple, Union
import numpy as np

from wrsample.priority.priorities import (
    coerce_weight,
    generate_sample_priority,
    is_eligible,
)
from wrsample.priority.slots import (
    SampleSlot,
    compare_slots,
    empty_slots,
    slot_rank,
    sort_slots,
)


class FieldWeight:
    """
    Weight accessor reading a named field of a record.

    Mappings, pandas rows and other subscriptable records are read with
    ``record[name]``; records that are not subscriptable (dataclasses,
    namedtuples) are read with ``getattr``. A missing field is an error.

    Parameters
    ----------
    name : str
        Name of the weight field.
    """

    def __init__(self, name: str):
        self.name = name

    def __call__(self, record: Any) -> Any:
        if hasattr(record, "_fields") or not hasattr(record, "__getitem__"):
            return getattr(record, self.name)
        return record[self.name]

    def __repr__(self) -> str:
        return f"FieldWeight({self.name!r})"


def resolve_weight_accessor(weight: Union[str, Callable[[Any], Any]]) -> Callable[[Any], Any]:
    """
    Turn a field name or a callable into a weight accessor.

    Parameters
    ----------
    weight : str or callable
        Name of the weight field, or a function record -> weight.

    Returns
    -------
    callable
        The accessor.

    Raises
    ------
    TypeError
        If ``weight`` is neither a string nor callable.
    """
    if isinstance(weight, str):
        return FieldWeight(weight)
    if callable(weight):
        return weight
    raise TypeError(
        f"weight must be a field name or a callable, got {type(weight).__name__}"
    )


def _eligible_records(
    records: Iterable[Any],
    weight_of: Callable[[Any], Any],
) -> Iterable[Tuple[int, Any, float]]:
    # Yields (position, record, weight); weights <= 0 and NaN are dropped.
    for position, record in enumerate(records):
        weight = coerce_weight(weight_of(record))
        if is_eligible(weight):
            yield position, record, weight


def scan_partition(
    records: Iterable[Any],
    weight_of: Callable[[Any], Any],
    k: int,
    rng: np.random.Generator,
    partition_index: int = 0,
) -> List[SampleSlot]:
    """
    Select the partition-local top-k priorities (without replacement).

    Parameters
    ----------
    records : iterable
        Records of one partition, scanned once in order.
    weight_of : callable
        Weight accessor, see resolve_weight_accessor().
    k : int
        Number of slots.
    rng : np.random.Generator
        Random source of this partition.
    partition_index : int, default=0
        Index of the partition, recorded in the slot origins.

    Returns
    -------
    List[SampleSlot]
        Exactly k slots ordered best rank first. If fewer than k records
        were eligible the tail holds placeholders.

    Notes
    -----
    Each eligible record draws exactly one priority. Ineligible records
    draw nothing, so they do not shift the random stream of the records
    that follow them.

    The candidate replaces the weakest retained slot when it ranks above
    it. This keeps the same k candidates as comparing the priority against
    every slot with a replace-if-greater rule, at O(log k) per record.

    Examples
    --------
    >>> from wrsample.priority.priorities import partition_rng
    >>> rows = [{"w": 1.0, "id": 1}, {"w": 0.0, "id": 2}, {"w": 3.0, "id": 3}]
    >>> slots = scan_partition(rows, FieldWeight("w"), 2, partition_rng(7, 0))
    >>> sorted(slot.payload["id"] for slot in slots)
    [1, 3]
    """
    if k <= 0:
        return []

    # Min-heap of (rank, slot); ranks are unique within a partition.
    heap: List[Tuple[Tuple[float, int, int], SampleSlot]] = []

    for position, record, weight in _eligible_records(records, weight_of):
        candidate = SampleSlot(
            priority=generate_sample_priority(weight, rng),
            payload=record,
            origin=(partition_index, position),
        )
        entry = (slot_rank(candidate), candidate)
        if len(heap) < k:
            heapq.heappush(heap, entry)
        elif compare_slots(heap[0][1], candidate) < 0:
            heapq.heapreplace(heap, entry)

    slots = sort_slots([slot for _, slot in heap])
    return slots + empty_slots(k - len(slots))


def scan_partition_with_replacement(
    records: Iterable[Any],
    weight_of: Callable[[Any], Any],
    k: int,
    rng: np.random.Generator,
    partition_index: int = 0,
) -> List[SampleSlot]:
    """
    Run k independent weighted races over one partition.

    Every eligible record draws one priority per slot, and each slot keeps
    the record with the highest priority it has seen. Slot j therefore holds
    record i with probability w_i / sum(w), independently of the other
    slots: weighted sampling with replacement.

    Parameters
    ----------
    records : iterable
        Records of one partition, scanned once in order.
    weight_of : callable
        Weight accessor.
    k : int
        Number of slots (independent draws).
    rng : np.random.Generator
        Random source of this partition.
    partition_index : int, default=0
        Index of the partition.

    Returns
    -------
    List[SampleSlot]
        Exactly k slots in slot order (not sorted: slot j is draw j).
        All slots are placeholders if no record was eligible.
    """
    if k <= 0:
        return []

    slots = empty_slots(k)
    for position, record, weight in _eligible_records(records, weight_of):
        for idx in range(k):
            replacement = SampleSlot(
                priority=generate_sample_priority(weight, rng),
                payload=record,
                origin=(partition_index, position),
            )
            if compare_slots(slots[idx], replacement) < 0:
                slots[idx] = replacement

    return slots
