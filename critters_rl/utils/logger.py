"""
Logging utilities for critters_rl

Provides standardized logging configuration for training runs and
compact formatting of training metrics.
"""

import logging
import sys
from collections.abc import Mapping
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(level: int | str) -> int:
    """
    Convert log level string to logging constant.

    Parameters
    ----------
    level : int or str
        Log level as int (logging.INFO) or string ("INFO").

    Returns
    -------
    int
        Logging level constant.

    Raises
    ------
    ValueError
        If level string is invalid.
    """
    if isinstance(level, int):
        return level

    try:
        return _LEVELS[level.upper()]
    except KeyError:
        raise ValueError(
            f"Invalid log level: {level}. Must be one of {list(_LEVELS)}"
        ) from None


def setup_logger(
    name: str = "critters_rl",
    level: int | str = logging.INFO,
    log_file: str | Path | None = None,
    format_string: str | None = None,
    use_rotation: bool = False,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Parameters
    ----------
    name : str, optional
        Logger name. Default is 'critters_rl'.
    level : int or str, optional
        Logging level. Default is logging.INFO.
    log_file : str, Path, or None, optional
        Optional path to log file. Parent directories are created.
    format_string : str or None, optional
        Custom format string for log messages.
    use_rotation : bool, optional
        Use RotatingFileHandler instead of FileHandler. Default is False.
    max_bytes : int, optional
        Maximum bytes per log file when rotating. Default is 10MB.
    backup_count : int, optional
        Number of rotated files to keep. Default is 5.

    Returns
    -------
    logging.Logger
        Configured logger instance. Calling again with the same name
        returns the existing logger without adding handlers.

    Examples
    --------
    >>> logger = setup_logger("train_dqn", level="INFO", log_file="logs/train.log")
    >>> logger.info("Training started")
    """
    level = get_log_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        if use_rotation:
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        else:
            file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")

        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logger_from_config(
    name: str, logging_cfg: Mapping[str, Any] | None
) -> logging.Logger:
    """
    Set up a logger from a ``logging`` config section.

    Recognised keys are ``level``, ``log_dir``, ``log_file`` and
    ``use_rotation``. Missing keys fall back to console-only INFO logging.
    """
    logging_cfg = logging_cfg or {}
    log_file = None
    if logging_cfg.get("log_file"):
        log_file = Path(logging_cfg.get("log_dir", ".")) / logging_cfg["log_file"]
    return setup_logger(
        name=name,
        level=logging_cfg.get("level", logging.INFO),
        log_file=log_file,
        use_rotation=bool(logging_cfg.get("use_rotation", False)),
    )


def get_logger(name: str = "critters_rl") -> logging.Logger:
    """
    Get an existing logger or create a new one with default settings.

    Examples
    --------
    >>> from critters_rl.utils import get_logger
    >>> logger = get_logger(__name__)
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        setup_logger(name)
    return logger


def format_metrics(metrics: Mapping[str, float], precision: int = 4) -> str:
    """Render a metrics dict as ``key=value`` pairs separated by ``|``."""
    parts = []
    for key, value in metrics.items():
        if isinstance(value, float):
            parts.append(f"{key}={value:.{precision}f}")
        else:
            parts.append(f"{key}={value}")
    return " | ".join(parts)
