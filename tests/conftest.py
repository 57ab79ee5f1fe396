"""
Pytest Configuration and Fixtures for wrsample
==============================================

Shared record builders and partition fixtures.
"""

import pytest


def make_record(record_id, weight):
    """A row-like record with an id and a sampling weight."""
    return {"id": record_id, "w": weight}


def ids(records):
    """Ids of sampled records as a set."""
    return {record["id"] for record in records}


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def two_partitions():
    """Partition A = ids 1, 2 and partition B = id 3, all with weight 1."""
    return [
        [make_record(1, 1.0), make_record(2, 1.0)],
        [make_record(3, 1.0)],
    ]


@pytest.fixture
def mixed_weight_partitions():
    """Three partitions with positive, zero, negative and NaN weights."""
    return [
        [make_record(1, 2.0), make_record(2, 0.0), make_record(3, 5.0)],
        [make_record(4, -5.0), make_record(5, 1.0), make_record(6, float("nan"))],
        [make_record(7, 0.5), make_record(8, 3.0)],
    ]


@pytest.fixture
def large_partitions():
    """Four partitions of 50 records with weights 1..200."""
    return [
        [make_record(p * 50 + i, float(p * 50 + i + 1)) for i in range(50)]
        for p in range(4)
    ]
