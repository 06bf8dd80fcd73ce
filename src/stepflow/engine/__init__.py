"""Workflow engine module for running workflows."""

from .engine import WorkflowEngine
from .types import calculate_retry_delay, elapsed_ms, invoke, with_timeout

__all__ = [
    "WorkflowEngine",
    "calculate_retry_delay",
    "elapsed_ms",
    "invoke",
    "with_timeout",
]
