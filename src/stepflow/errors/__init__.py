"""Stepflow error handling - typed errors with workflow and step context."""

from .errors import (
    ErrorCategory,
    StepExecutionError,
    StepTimeoutError,
    WorkflowError,
    WorkflowValidationError,
)
from .normalize import error_message, wrap_step_error

__all__ = [
    # Core error types
    "ErrorCategory",
    "WorkflowError",
    "StepExecutionError",
    "StepTimeoutError",
    "WorkflowValidationError",
    # Helpers
    "error_message",
    "wrap_step_error",
]
