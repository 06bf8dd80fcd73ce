"""Normalization of arbitrary step failures into typed errors."""

from .errors import StepExecutionError, StepTimeoutError, WorkflowError


def error_message(error: BaseException) -> str:
    """Render an exception as a non-empty message string.

    Args:
        error: Any exception raised by step code

    Returns:
        The exception's message, or its class name when the message is empty
    """
    message = str(error)
    return message if message else type(error).__name__


def wrap_step_error(error: BaseException, step_id: str, workflow_name: str) -> WorkflowError:
    """Classify a step failure.

    Already-typed step errors pass through unchanged. Everything else is
    wrapped in a StepExecutionError that keeps the original as its cause.

    Args:
        error: Final error of the step lifecycle
        step_id: Failing step
        workflow_name: Workflow containing the step

    Returns:
        The error to raise out of the step
    """
    if isinstance(error, (StepExecutionError, StepTimeoutError)):
        return error
    return StepExecutionError(step_id, workflow_name, error_message(error), cause=error)
