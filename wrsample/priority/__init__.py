"""
Priority sampling module for distributed weighted sampling.

This module provides weighted sampling without replacement over data split
into independent partitions. Each partition is scanned once with its own
seeded random source, keeps its k best sampling priorities, and the
partition results are merged into the final sample.

Key Concepts:
- **Priority**: ln(u) / w for u ~ Uniform[0, 1); larger is better
- **Sample slot**: a (priority, record) pair; empty slots hold -inf
- **Merge**: associative, commutative combination of partition results

Reference: Efraimidis & Spirakis (2006), Algorithm A-ES
"""

from wrsample.priority.slots import (
    EMPTY_PRIORITY,
    SampleSlot,
    empty_slots,
    is_placeholder,
    slot_rank,
    compare_slots,
)
from wrsample.priority.priorities import (
    LOWEST_PRIORITY,
    derive_partition_seed,
    partition_rng,
    generate_sample_priority,
    generate_sample_priorities,
    coerce_weight,
)
from wrsample.priority.partition import (
    FieldWeight,
    resolve_weight_accessor,
    scan_partition,
    scan_partition_with_replacement,
)
from wrsample.priority.merge import (
    MERGE_STRATEGIES,
    merge_slotwise,
    merge_global,
    reduce_partition_results,
    extract_payloads,
)
from wrsample.priority.sampler import (
    scan_partitions,
    sample_without_replacement,
    sample_with_replacement,
    sample_from_config,
)

__all__ = [
    # Slots
    "EMPTY_PRIORITY",
    "SampleSlot",
    "empty_slots",
    "is_placeholder",
    "slot_rank",
    "compare_slots",
    # Priorities
    "LOWEST_PRIORITY",
    "derive_partition_seed",
    "partition_rng",
    "generate_sample_priority",
    "generate_sample_priorities",
    "coerce_weight",
    # Partition scans
    "FieldWeight",
    "resolve_weight_accessor",
    "scan_partition",
    "scan_partition_with_replacement",
    # Merging
    "MERGE_STRATEGIES",
    "merge_slotwise",
    "merge_global",
    "reduce_partition_results",
    "extract_payloads",
    # Sampling
    "scan_partitions",
    "sample_without_replacement",
    "sample_with_replacement",
    "sample_from_config",
]
