"""Stepflow logging - lifecycle logging for workflow runs."""

from .colors import CYAN, GREEN, LIGHT_BLUE, MAGENTA, RED, RESET, YELLOW
from .formatters import ColoredLogFormatter, StructuredLogFormatter
from .logger import (
    LogConfig,
    RunLogger,
    StepflowLogger,
    StepLogger,
    configure_logging,
    get_logger,
    reset_loggers,
)

__all__ = [
    # Logger classes
    "StepflowLogger",
    "RunLogger",
    "StepLogger",
    "LogConfig",
    "get_logger",
    "reset_loggers",
    "configure_logging",
    # Formatters
    "StructuredLogFormatter",
    "ColoredLogFormatter",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
