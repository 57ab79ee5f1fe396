"""
Sampling configuration.

A ``SamplingConfig`` bundles the arguments of a sampling run so that
pipelines can keep them in a YAML file next to their other settings:

.. code-block:: yaml

    sampling:
      k: 1000
      seed: 42
      weight: score
      replace: false
      merge: global
      num_threads: 4
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from wrsample.priority.merge import MERGE_STRATEGIES


@dataclass
class SamplingConfig:
    """
    Parameters of a weighted sampling run.

    Parameters
    ----------
    k : int
        Requested sample size.
    seed : int, default=0
        Base seed; partition i uses seed + i.
    weight : str, optional
        Name of the weight field. May be left unset when the caller passes
        a weight accessor directly.
    replace : bool, default=False
        Sample with replacement (independent per-slot draws).
    merge : str, default='global'
        Merge rule for sampling without replacement.
    num_threads : int, default=1
        Worker processes used to scan partitions.
    """

    k: int
    seed: int = 0
    weight: Optional[str] = None
    replace: bool = False
    merge: str = "global"
    num_threads: int = 1

    def validate(self) -> "SamplingConfig":
        """Check the values; returns self so calls can be chained."""
        if isinstance(self.k, bool) or not isinstance(self.k, int):
            raise TypeError(f"k must be an integer, got {type(self.k).__name__}")
        if self.k < 0:
            raise ValueError(f"k must be non-negative, got {self.k}")
        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            raise TypeError(f"seed must be an integer, got {type(self.seed).__name__}")
        if self.merge not in MERGE_STRATEGIES:
            raise ValueError(
                f"Unknown merge strategy: {self.merge}. "
                f"Use one of {sorted(MERGE_STRATEGIES)}."
            )
        if self.num_threads < 1:
            raise ValueError(f"num_threads must be >= 1, got {self.num_threads}")
        if self.weight is not None and not isinstance(self.weight, str):
            raise TypeError(f"weight must be a field name, got {type(self.weight).__name__}")
        return self

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "SamplingConfig":
        """
        Build a config from a mapping, rejecting unknown keys.

        A nested ``sampling`` section is used when present.
        """
        if "sampling" in values and isinstance(values["sampling"], dict):
            values = values["sampling"]
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown sampling config keys: {sorted(unknown)}")
        if "k" not in values:
            raise ValueError("Sampling config must define 'k'")
        return cls(**values).validate()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_sampling_config(path: Union[str, Path]) -> SamplingConfig:
    """
    Load a sampling config from a YAML file.

    Parameters
    ----------
    path : str or Path
        YAML file, either flat or with a top-level ``sampling`` section.

    Returns
    -------
    SamplingConfig

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Sampling config not found: {cfg_path}")
    with cfg_path.open() as f:
        values = yaml.safe_load(f) or {}
    return SamplingConfig.from_dict(values)
