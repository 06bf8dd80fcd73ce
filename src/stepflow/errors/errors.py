"""Stepflow error types."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from stepflow.types import ValidationIssue


class ErrorCategory(str, Enum):
    """Error source categories."""

    WORKFLOW = "WORKFLOW"
    STEP = "STEP"
    VALIDATION = "VALIDATION"


class WorkflowError(Exception):
    """Workflow-scoped failure. Base exception for all run-time errors."""

    code = "WORKFLOW_FAILED"
    category = ErrorCategory.WORKFLOW

    def __init__(
        self,
        workflow_name: str,
        message: str,
        cause: BaseException | None = None,
    ):
        """Initialize workflow error.

        Args:
            workflow_name: Name of the workflow that failed
            message: Human-readable summary
            cause: Optional original exception
        """
        super().__init__(message)
        self.workflow_name = workflow_name
        self.message = message
        self.cause = cause
        self.timestamp = datetime.now(UTC)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for event payloads and logs.

        Returns:
            Dictionary representation of the error
        """
        data: dict[str, Any] = {
            "code": self.code,
            "category": self.category.value,
            "type": type(self).__name__,
            "message": self.message,
            "workflow_name": self.workflow_name,
            "timestamp": self.timestamp.isoformat(),
            "cause": None,
        }
        if self.cause is not None:
            data["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        return data


class StepExecutionError(WorkflowError):
    """A step's work failed for a reason other than a timeout."""

    code = "STEP_FAILED"
    category = ErrorCategory.STEP

    def __init__(
        self,
        step_id: str,
        workflow_name: str,
        message: str,
        cause: BaseException | None = None,
    ):
        super().__init__(workflow_name, message, cause)
        self.step_id = step_id

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["step_id"] = self.step_id
        return data


class StepTimeoutError(WorkflowError):
    """A step attempt did not finish within its configured timeout."""

    code = "STEP_TIMEOUT"
    category = ErrorCategory.STEP

    def __init__(
        self,
        step_id: str,
        workflow_name: str,
        timeout: int,
        cause: BaseException | None = None,
    ):
        """Initialize timeout error.

        Args:
            step_id: Step that timed out
            workflow_name: Workflow containing the step
            timeout: Configured timeout in milliseconds
            cause: Optional original exception
        """
        super().__init__(workflow_name, f"Step '{step_id}' timed out after {timeout}ms", cause)
        self.step_id = step_id
        self.timeout = timeout

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["step_id"] = self.step_id
        data["timeout"] = self.timeout
        return data


class WorkflowValidationError(ValueError):
    """Construction-time validation failure. Never retried."""

    code = "VALIDATION_FAILED"
    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, issues: list[ValidationIssue] | None = None):
        super().__init__(message)
        self.message = message
        self.issues = issues or []

    @classmethod
    def from_issues(cls, issues: list[ValidationIssue], prefix: str) -> "WorkflowValidationError":
        """Build a single error listing every issue.

        Args:
            issues: Validation issues (errors only)
            prefix: Leading sentence for the message

        Returns:
            WorkflowValidationError carrying the issues
        """
        if len(issues) == 1:
            return cls(issues[0].message, issues)
        lines = [f"- {issue.path}: {issue.message}" for issue in issues]
        return cls(prefix + ":\n" + "\n".join(lines), issues)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "category": self.category.value,
            "type": type(self).__name__,
            "message": self.message,
            "issues": [{"path": i.path, "message": i.message} for i in self.issues],
        }
