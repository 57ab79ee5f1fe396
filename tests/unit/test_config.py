"""Unit Tests for Sampling Configuration
======================================

Test suite for wrsample/utils/config.py

Test Coverage:
- SamplingConfig defaults and validation
- from_dict(): flat and nested mappings, unknown keys, missing k
- load_sampling_config(): YAML files, missing files
"""

import pytest

from wrsample.utils.config import SamplingConfig, load_sampling_config

# ============================================================================
# SamplingConfig
# ============================================================================


def test_defaults():
    config = SamplingConfig(k=3)
    assert config.to_dict() == {
        "k": 3,
        "seed": 0,
        "weight": None,
        "replace": False,
        "merge": "global",
        "num_threads": 1,
    }


def test_validate_returns_self():
    config = SamplingConfig(k=3, seed=-4, weight="w", merge="slotwise")
    assert config.validate() is config


@pytest.mark.parametrize(
    "kwargs, error, match",
    [
        ({"k": -1}, ValueError, "non-negative"),
        ({"k": 2.5}, TypeError, "k must be an integer"),
        ({"k": True}, TypeError, "k must be an integer"),
        ({"k": 1, "seed": "7"}, TypeError, "seed must be an integer"),
        ({"k": 1, "merge": "best"}, ValueError, "Unknown merge strategy"),
        ({"k": 1, "num_threads": 0}, ValueError, "num_threads"),
        ({"k": 1, "weight": 3}, TypeError, "field name"),
    ],
)
def test_validate_rejects_bad_values(kwargs, error, match):
    with pytest.raises(error, match=match):
        SamplingConfig(**kwargs).validate()


# ============================================================================
# from_dict()
# ============================================================================


def test_from_dict_flat():
    config = SamplingConfig.from_dict({"k": 5, "seed": 9, "weight": "score"})
    assert (config.k, config.seed, config.weight) == (5, 9, "score")


def test_from_dict_nested_section():
    config = SamplingConfig.from_dict({"sampling": {"k": 2, "replace": True}})
    assert config.k == 2
    assert config.replace is True


def test_from_dict_round_trip():
    config = SamplingConfig(k=4, seed=1, weight="w", num_threads=2)
    assert SamplingConfig.from_dict(config.to_dict()) == config


def test_from_dict_unknown_keys():
    with pytest.raises(ValueError, match=r"Unknown sampling config keys: \['size'\]"):
        SamplingConfig.from_dict({"k": 1, "size": 10})


def test_from_dict_missing_k():
    with pytest.raises(ValueError, match="must define 'k'"):
        SamplingConfig.from_dict({"seed": 1})


# ============================================================================
# load_sampling_config()
# ============================================================================


def test_load_nested_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "sampling:\n"
        "  k: 100\n"
        "  seed: 42\n"
        "  weight: score\n"
        "  merge: slotwise\n"
        "  num_threads: 4\n"
    )
    config = load_sampling_config(path)
    assert config == SamplingConfig(k=100, seed=42, weight="score", merge="slotwise", num_threads=4)


def test_load_flat_yaml(tmp_path):
    path = tmp_path / "sampling.yml"
    path.write_text("k: 3\nreplace: true\n")
    config = load_sampling_config(str(path))
    assert config.k == 3
    assert config.replace is True


def test_load_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with pytest.raises(ValueError, match="must define 'k'"):
        load_sampling_config(path)


def test_load_invalid_merge(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("k: 3\nmerge: random\n")
    with pytest.raises(ValueError, match="Unknown merge strategy"):
        load_sampling_config(path)


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError, match="Sampling config not found"):
        load_sampling_config(tmp_path / "missing.yaml")
