"""
Merging partition results into the final top-k.

Partition results are combined pairwise. Two merge rules are provided:

- ``slotwise``: slot i of the merged result is the better of the two
  inputs' slot i. It is exact for independent per-slot races (sampling
  with replacement) but is not a true global top-k when partitions hold
  uneven candidates.
- ``global``: both k-slot lists are concatenated and the k best ranks are
  re-selected. This is the true global top-k.

Both rules are associative and commutative, so the reduction may run as a
linear fold, a tree, or in any order with the same result.
"""

from functools import reduce
from typing import Any, Callable, Dict, List, Sequence

from wrsample.priority.slots import (
    SampleSlot,
    compare_slots,
    empty_slots,
    is_placeholder,
    sort_slots,
)

MergeFunction = Callable[[List[SampleSlot], List[SampleSlot]], List[SampleSlot]]


def _check_same_length(left: Sequence[SampleSlot], right: Sequence[SampleSlot]) -> None:
    if len(left) != len(right):
        raise ValueError(
            f"Partition results must have the same number of slots, "
            f"got {len(left)} and {len(right)}"
        )


def merge_slotwise(
    left: List[SampleSlot],
    right: List[SampleSlot],
) -> List[SampleSlot]:
    """
    Merge two slot arrays index by index, keeping the better slot.

    Parameters
    ----------
    left, right : List[SampleSlot]
        Partition results with the same number of slots.

    Returns
    -------
    List[SampleSlot]
        A new slot array; the inputs are not modified.
    """
    _check_same_length(left, right)
    return [
        right_slot if compare_slots(left_slot, right_slot) < 0 else left_slot
        for left_slot, right_slot in zip(left, right)
    ]


def merge_global(
    left: List[SampleSlot],
    right: List[SampleSlot],
) -> List[SampleSlot]:
    """
    Merge two slot arrays into the k best of their union.

    Parameters
    ----------
    left, right : List[SampleSlot]
        Partition results with the same number of slots.

    Returns
    -------
    List[SampleSlot]
        The k best slots of ``left + right``, best rank first.
    """
    _check_same_length(left, right)
    return sort_slots(list(left) + list(right))[: len(left)]


MERGE_STRATEGIES: Dict[str, MergeFunction] = {
    "slotwise": merge_slotwise,
    "global": merge_global,
}


def get_merge_function(strategy: str) -> MergeFunction:
    """Look up a merge rule by name ('slotwise' or 'global')."""
    try:
        return MERGE_STRATEGIES[strategy]
    except KeyError:
        raise ValueError(
            f"Unknown merge strategy: {strategy}. "
            f"Use one of {sorted(MERGE_STRATEGIES)}."
        ) from None


def _tree_reduce(results: List[List[SampleSlot]], merge: MergeFunction) -> List[SampleSlot]:
    while len(results) > 1:
        merged = [
            merge(results[i], results[i + 1]) for i in range(0, len(results) - 1, 2)
        ]
        if len(results) % 2:
            merged.append(results[-1])
        results = merged
    return results[0]


def reduce_partition_results(
    results: Sequence[List[SampleSlot]],
    k: int,
    strategy: str = "global",
    tree: bool = False,
) -> List[SampleSlot]:
    """
    Reduce all partition results into one k-slot array.

    Parameters
    ----------
    results : sequence of List[SampleSlot]
        One k-slot array per partition.
    k : int
        Number of slots.
    strategy : str, default='global'
        Merge rule, 'global' or 'slotwise'.
    tree : bool, default=False
        If True, merge pairwise in a balanced tree instead of a left fold.
        The outcome is identical.

    Returns
    -------
    List[SampleSlot]
        The merged slot array. k placeholders if ``results`` is empty.

    Examples
    --------
    >>> from wrsample.priority.slots import SampleSlot
    >>> a = [SampleSlot(-0.1, "a", (0, 0)), SampleSlot(-0.2, "b", (0, 1))]
    >>> b = [SampleSlot(-0.15, "c", (1, 0)), SampleSlot(-0.9, "d", (1, 1))]
    >>> [s.payload for s in reduce_partition_results([a, b], 2, "global")]
    ['a', 'c']
    >>> [s.payload for s in reduce_partition_results([a, b], 2, "slotwise")]
    ['a', 'b']
    """
    merge = get_merge_function(strategy)
    results = list(results)
    if not results:
        return empty_slots(k)
    if tree:
        return _tree_reduce(results, merge)
    return reduce(merge, results)


def extract_payloads(slots: Sequence[SampleSlot]) -> List[Any]:
    """
    Return the payloads of all filled slots.

    Placeholder slots are dropped, so a short result is returned when
    fewer than k records were eligible. Payloads are ordered best rank
    first.
    """
    return [slot.payload for slot in sort_slots(list(slots)) if not is_placeholder(slot)]
