"""
Sample slots for top-k priority sampling.

A sample slot pairs a sampling priority with the record (payload) that
produced it. A partition result is a fixed-size list of k slots; unfilled
slots carry a priority of negative infinity so that any real candidate
displaces them.

Reference: Efraimidis & Spirakis (2006), "Weighted random sampling with a
reservoir", Information Processing Letters 97(5)
"""

from dataclasses import dataclass
from typing import Any, List, Tuple

EMPTY_PRIORITY = float("-inf")
EMPTY_ORIGIN = (-1, -1)


@dataclass(frozen=True)
class SampleSlot:
    """
    A (priority, payload) pair held in a top-k slot array.

    Parameters
    ----------
    priority : float
        Sampling priority, ln(u) / weight. Higher ranks first.
    payload : Any
        The sampled record. None for placeholder slots.
    origin : tuple of int
        (partition_index, position) of the record inside its partition.
        Only used to break ties between equal priorities.
    """

    priority: float = EMPTY_PRIORITY
    payload: Any = None
    origin: Tuple[int, int] = EMPTY_ORIGIN


def empty_slots(k: int) -> List[SampleSlot]:
    """Return k placeholder slots."""
    return [SampleSlot() for _ in range(k)]


def is_placeholder(slot: SampleSlot) -> bool:
    """True if the slot has never been filled from a real record."""
    return slot.priority == EMPTY_PRIORITY


def slot_rank(slot: SampleSlot) -> Tuple[float, int, int]:
    """
    Total-order key for a slot; a larger key means a better candidate.

    Equal priorities are resolved in favour of the earlier partition and,
    within a partition, the earlier position.
    """
    partition_index, position = slot.origin
    return (slot.priority, -partition_index, -position)


def compare_slots(left: SampleSlot, right: SampleSlot) -> int:
    """
    Three-way comparison of two slots by rank.

    Returns
    -------
    int
        -1 if ``left`` ranks below ``right``, 1 if above, 0 if equal.
    """
    left_rank = slot_rank(left)
    right_rank = slot_rank(right)
    if left_rank < right_rank:
        return -1
    if left_rank > right_rank:
        return 1
    return 0


def sort_slots(slots: List[SampleSlot]) -> List[SampleSlot]:
    """Return the slots ordered best rank first."""
    return sorted(slots, key=slot_rank, reverse=True)
