"""Shared types for stepflow.

Import from here rather than submodules:
    from stepflow.types import BackoffType, LogLevel, ValidationIssue
"""

from .enums import BackoffType, LogFormat, LogLevel
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "BackoffType",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
