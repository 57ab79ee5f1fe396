"""
Logging helpers for the wrsample package.

Library modules obtain loggers with ``get_logger(__name__)``. Nothing is
emitted until the application configures logging, either through its own
setup or with ``configure_logging``.
"""

import logging
import logging.config
from pathlib import Path
from typing import Optional, Union

import yaml

ROOT_LOGGER_NAME = "wrsample"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger in the ``wrsample`` hierarchy.

    Parameters
    ----------
    name : str, optional
        Module name. Names outside the package are nested under it.

    Returns
    -------
    logging.Logger
    """
    if not name or name == "__main__":
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    level: Union[str, int] = "INFO",
    path: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """
    Configure package logging.

    Parameters
    ----------
    level : str or int, default='INFO'
        Level of the package root logger when no config file is given.
    path : str or Path, optional
        YAML file in ``logging.config.dictConfig`` format. When given it is
        applied as is and ``level`` is ignored.

    Returns
    -------
    logging.Logger
        The package root logger.

    Raises
    ------
    FileNotFoundError
        If ``path`` does not exist.
    """
    if path is not None:
        cfg_path = Path(path)
        with cfg_path.open() as f:
            logging.config.dictConfig(yaml.safe_load(f))
        return logging.getLogger(ROOT_LOGGER_NAME)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(level)

    has_stream_handler = any(
        isinstance(handler, logging.StreamHandler) for handler in root_logger.handlers
    )
    if not has_stream_handler:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    return root_logger
