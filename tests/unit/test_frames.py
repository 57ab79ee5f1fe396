"""Unit Tests for the DataFrame Adapter
======================================

Test suite for wrsample/frames/sampling.py

Test Coverage:
- split_frame(): sizes, order, validation
- scan_weight_array(): eligibility, padding, replacement
- sample_frame(): size, index preservation, determinism, exclusions,
  column validation, k = 0, replacement
- sample_partitioned_frames(): caller-supplied partitions
- Argument checks shared with the record samplers
- Tiny weights and draw-for-draw agreement with the record path
"""

import numpy as np
import pandas as pd
import pytest

from wrsample.frames.sampling import (
    sample_frame,
    sample_partitioned_frames,
    scan_weight_array,
    split_frame,
)
from wrsample.priority.priorities import partition_rng
from wrsample.priority.sampler import sample_with_replacement, sample_without_replacement
from wrsample.priority.slots import is_placeholder

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def scores():
    """100 rows indexed by string labels with weights 1..100."""
    return pd.DataFrame(
        {
            "user": [f"u{i}" for i in range(100)],
            "score": np.arange(1.0, 101.0),
        },
        index=[f"row{i}" for i in range(100)],
    )


@pytest.fixture
def mixed_scores():
    return pd.DataFrame(
        {
            "id": [0, 1, 2, 3, 4, 5],
            "score": [0.0, -1.0, np.nan, 2.0, 3.0, 0.0],
        }
    )


# ============================================================================
# split_frame()
# ============================================================================


def test_split_frame_sizes(scores):
    parts = split_frame(scores, 3)
    assert [len(part) for part in parts] == [34, 33, 33]


def test_split_frame_preserves_order(scores):
    parts = split_frame(scores, 4)
    pd.testing.assert_frame_equal(pd.concat(parts), scores)


def test_split_frame_more_partitions_than_rows():
    df = pd.DataFrame({"score": [1.0, 2.0]})
    parts = split_frame(df, 4)
    assert [len(part) for part in parts] == [1, 1, 0, 0]


def test_split_frame_invalid_partitions(scores):
    with pytest.raises(ValueError, match="num_partitions"):
        split_frame(scores, 0)


# ============================================================================
# scan_weight_array()
# ============================================================================


def test_scan_weight_array_excludes_ineligible():
    weights = np.array([0.0, -1.0, np.nan, 2.0, 3.0])
    slots = scan_weight_array(weights, 4, partition_rng(0, 0))
    positions = {slot.payload for slot in slots if not is_placeholder(slot)}
    assert positions == {3, 4}
    assert sum(is_placeholder(slot) for slot in slots) == 2


def test_scan_weight_array_all_ineligible():
    slots = scan_weight_array(np.zeros(5), 3, partition_rng(0, 0))
    assert len(slots) == 3
    assert all(is_placeholder(slot) for slot in slots)


def test_scan_weight_array_best_first():
    slots = scan_weight_array(np.arange(1.0, 21.0), 5, partition_rng(1, 0))
    priorities = [slot.priority for slot in slots]
    assert priorities == sorted(priorities, reverse=True)
    assert len(set(slot.payload for slot in slots)) == 5


def test_scan_weight_array_origin_uses_partition_index():
    slots = scan_weight_array(np.array([1.0]), 1, partition_rng(0, 2), partition_index=2)
    assert slots[0].origin == (2, 0)


def test_scan_weight_array_with_replacement():
    slots = scan_weight_array(np.array([0.0, 5.0]), 6, partition_rng(0, 0), replace=True)
    assert [slot.payload for slot in slots] == [1] * 6


def test_scan_weight_array_zero_k():
    assert scan_weight_array(np.array([1.0]), 0, partition_rng(0, 0)) == []


# ============================================================================
# sample_frame()
# ============================================================================


@pytest.mark.parametrize("num_partitions", [1, 3, 7])
def test_sample_frame_returns_k_distinct_rows(scores, num_partitions):
    sample = sample_frame(scores, "score", 10, seed=42, num_partitions=num_partitions)
    assert len(sample) == 10
    assert sample.index.is_unique
    assert set(sample.index) <= set(scores.index)
    pd.testing.assert_frame_equal(sample, scores.loc[sample.index])


def test_sample_frame_deterministic(scores):
    a = sample_frame(scores, "score", 8, seed=5, num_partitions=4)
    b = sample_frame(scores, "score", 8, seed=5, num_partitions=4)
    pd.testing.assert_frame_equal(a, b)


def test_sample_frame_excludes_non_positive_weights(mixed_scores):
    for seed in range(20):
        sample = sample_frame(mixed_scores, "score", 2, seed=seed, num_partitions=2)
        assert set(sample["id"]) <= {3, 4}


def test_sample_frame_short_result(mixed_scores):
    sample = sample_frame(mixed_scores, "score", 5, seed=0, num_partitions=3)
    assert sorted(sample["id"]) == [3, 4]


def test_sample_frame_zero_k_keeps_columns(scores):
    sample = sample_frame(scores, "score", 0, seed=0)
    assert sample.empty
    assert list(sample.columns) == ["user", "score"]


def test_sample_frame_missing_column(scores):
    with pytest.raises(ValueError, match="weight column 'weight'"):
        sample_frame(scores, "weight", 3, seed=0)


def test_sample_frame_non_numeric_column(scores):
    with pytest.raises(TypeError, match="must be numeric"):
        sample_frame(scores, "user", 3, seed=0)


def test_sample_frame_negative_k(scores):
    with pytest.raises(ValueError, match="non-negative"):
        sample_frame(scores, "score", -2, seed=0)


@pytest.mark.parametrize("k", [2.5, True, "3"])
def test_sample_frame_non_integer_k(scores, k):
    with pytest.raises(TypeError, match="k must be an integer"):
        sample_frame(scores, "score", k, seed=0)


@pytest.mark.parametrize("seed", [1.7, "1", None])
def test_sample_frame_non_integer_seed(scores, seed):
    with pytest.raises(TypeError, match="seed must be an integer"):
        sample_frame(scores, "score", 2, seed=seed)


def test_sample_frame_with_replacement(scores):
    sample = sample_frame(scores, "score", 30, seed=3, num_partitions=2, replace=True)
    assert len(sample) == 30
    assert (sample["score"] > 0).all()


def test_sample_frame_favours_heavy_rows():
    df = pd.DataFrame({"score": [1.0] * 50 + [1000.0] * 5})
    sample = sample_frame(df, "score", 5, seed=11, num_partitions=5)
    assert (sample["score"] == 1000.0).sum() >= 3


def test_sample_frame_slotwise_merge(scores):
    sample = sample_frame(scores, "score", 6, seed=2, num_partitions=3, merge="slotwise")
    assert len(sample) == 6
    assert sample.index.is_unique


# ============================================================================
# sample_partitioned_frames()
# ============================================================================


def test_sample_partitioned_frames_matches_split(scores):
    parts = split_frame(scores, 4)
    direct = sample_partitioned_frames(parts, "score", 5, seed=9)
    via_split = sample_frame(scores, "score", 5, seed=9, num_partitions=4)
    pd.testing.assert_frame_equal(direct, via_split)


def test_sample_partitioned_frames_no_frames():
    assert sample_partitioned_frames([], "score", 3, seed=0).empty


def test_sample_partitioned_frames_duplicate_index_labels():
    """Partitions may reuse index labels; rows are addressed by position."""
    a = pd.DataFrame({"score": [1.0, 2.0]}, index=[0, 1])
    b = pd.DataFrame({"score": [3.0, 4.0]}, index=[0, 1])
    sample = sample_partitioned_frames([a, b], "score", 4, seed=1)
    assert sorted(sample["score"]) == [1.0, 2.0, 3.0, 4.0]


# ============================================================================
# Agreement with the record samplers
# ============================================================================


@pytest.fixture
def small_table():
    return pd.DataFrame(
        {
            "id": [0, 1, 2, 3, 4, 5],
            "w": [1.0, 0.0, 2.0, 3.0, 0.5, 4.0],
        }
    )


def _record_partitions(frame, num_partitions):
    return [part.to_dict("records") for part in split_frame(frame, num_partitions)]


@pytest.mark.parametrize("seed", [0, 5, 21])
def test_with_replacement_matches_record_path(small_table, seed):
    """Both paths consume the random stream in the same order."""
    from_frame = sample_frame(small_table, "w", 8, seed=seed, num_partitions=2, replace=True)
    from_records = sample_with_replacement(
        _record_partitions(small_table, 2), "w", 8, seed=seed
    )
    assert sorted(from_frame["id"].tolist()) == sorted(r["id"] for r in from_records)


def test_without_replacement_matches_record_path(small_table):
    from_frame = sample_frame(small_table, "w", 3, seed=4, num_partitions=2)
    from_records = sample_without_replacement(_record_partitions(small_table, 2), "w", 3, seed=4)
    assert set(from_frame["id"]) == {r["id"] for r in from_records}


@pytest.mark.parametrize("seed", range(5))
def test_tiny_weight_rows_are_sampled(seed):
    df = pd.DataFrame({"w": [1e-310, 1e-310]})
    assert len(sample_frame(df, "w", 2, seed=seed)) == 2
    assert len(sample_frame(df, "w", 3, seed=seed, replace=True)) == 3
