"""
Logging and configuration helpers.
"""

from wrsample.utils.logging import get_logger, configure_logging
from wrsample.utils.config import SamplingConfig, load_sampling_config

__all__ = [
    "get_logger",
    "configure_logging",
    "SamplingConfig",
    "load_sampling_config",
]
