"""Tests for stepflow error types."""

from stepflow.errors import (
    ErrorCategory,
    StepExecutionError,
    StepTimeoutError,
    WorkflowError,
    WorkflowValidationError,
    error_message,
    wrap_step_error,
)
from stepflow.types import ValidationIssue


class TestErrorTypes:
    """Tests for the taxonomy."""

    def test_step_execution_error_fields(self):
        """Test StepExecutionError carries step and workflow context."""
        cause = ValueError("root")
        error = StepExecutionError("fetch", "etl", "fetch failed", cause=cause)

        assert isinstance(error, WorkflowError)
        assert str(error) == "fetch failed"
        assert error.step_id == "fetch"
        assert error.workflow_name == "etl"
        assert error.cause is cause
        assert error.category == ErrorCategory.STEP
        assert error.timestamp.tzinfo is not None

    def test_timeout_error_message(self):
        """Test StepTimeoutError formats the configured timeout."""
        error = StepTimeoutError("slow", "etl", 250)

        assert error.message == "Step 'slow' timed out after 250ms"
        assert error.timeout == 250
        assert isinstance(error, WorkflowError)
        assert not isinstance(error, TimeoutError)

    def test_to_dict(self):
        """Test serialization includes code, context and cause."""
        error = StepTimeoutError("slow", "etl", 250, cause=RuntimeError("inner"))

        data = error.to_dict()

        assert data["code"] == "STEP_TIMEOUT"
        assert data["category"] == "STEP"
        assert data["step_id"] == "slow"
        assert data["timeout"] == 250
        assert data["cause"] == {"type": "RuntimeError", "message": "inner"}

    def test_validation_error_from_issues(self):
        """Test multiple issues are joined into one message."""
        issues = [
            ValidationIssue(path="name", message="bad name"),
            ValidationIssue(path="steps[0].id", message="bad id"),
        ]
        error = WorkflowValidationError.from_issues(issues, "Invalid workflow")

        assert isinstance(error, ValueError)
        assert error.message.startswith("Invalid workflow:")
        assert "- steps[0].id: bad id" in error.message
        assert error.to_dict()["issues"][0] == {"path": "name", "message": "bad name"}

    def test_validation_error_single_issue(self):
        """Test a single issue becomes the message as-is."""
        issues = [ValidationIssue(path="name", message="bad name")]
        assert WorkflowValidationError.from_issues(issues, "Invalid").message == "bad name"


class TestWrapStepError:
    """Tests for error classification."""

    def test_wraps_plain_exceptions(self):
        """Test raw errors are wrapped with the original as cause."""
        original = RuntimeError("boom")
        wrapped = wrap_step_error(original, "s", "wf")

        assert isinstance(wrapped, StepExecutionError)
        assert wrapped.message == "boom"
        assert wrapped.cause is original

    def test_typed_errors_pass_through(self):
        """Test StepExecutionError and StepTimeoutError are returned unchanged."""
        step_error = StepExecutionError("a", "wf", "x")
        timeout = StepTimeoutError("b", "wf", 10)

        assert wrap_step_error(step_error, "s", "wf") is step_error
        assert wrap_step_error(timeout, "s", "wf") is timeout

    def test_plain_workflow_error_is_wrapped(self):
        """Test only step-scoped typed errors bypass wrapping."""
        error = WorkflowError("wf", "workflow level")
        assert isinstance(wrap_step_error(error, "s", "wf"), StepExecutionError)

    def test_error_message_normalization(self):
        """Test empty messages fall back to the class name."""
        assert error_message(ValueError("bad")) == "bad"
        assert error_message(ValueError()) == "ValueError"
