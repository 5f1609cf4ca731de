"""Utility modules for critters_rl"""

from .config_validator import validate_config
from .logger import (
    format_metrics,
    get_log_level,
    get_logger,
    setup_logger,
    setup_logger_from_config,
)
from .metrics import RunningAverage

__all__ = [
    "RunningAverage",
    "format_metrics",
    "get_logger",
    "get_log_level",
    "setup_logger",
    "setup_logger_from_config",
    "validate_config",
]
