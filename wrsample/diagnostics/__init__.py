"""
Sampling diagnostics module.

Monte Carlo estimates of per-record inclusion frequencies, Wilson
confidence bounds, and per-group summaries used to check that higher
weights lead to higher inclusion rates.
"""

from wrsample.diagnostics.inclusion import (
    estimate_inclusion_frequencies,
    inclusion_confidence_interval,
    compare_group_inclusion,
)

__all__ = [
    "estimate_inclusion_frequencies",
    "inclusion_confidence_interval",
    "compare_group_inclusion",
]
