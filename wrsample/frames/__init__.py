"""
DataFrame adapter for weighted priority sampling.

This module samples rows of pandas DataFrames by a numeric weight column,
splitting the frame into row partitions that are scanned independently
and merged, the same way a partitioned table would be sampled.
"""

from wrsample.frames.sampling import (
    split_frame,
    scan_weight_array,
    sample_partitioned_frames,
    sample_frame,
)

__all__ = [
    "split_frame",
    "scan_weight_array",
    "sample_partitioned_frames",
    "sample_frame",
]
