"""Workflow and step validation."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from stepflow.errors import WorkflowValidationError
from stepflow.types import ValidationIssue, ValidationResult

if TYPE_CHECKING:
    from .types import Step


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_step_id(step_id: Any, path: str = "id") -> list[ValidationIssue]:
    if not step_id or not isinstance(step_id, str):
        return [ValidationIssue(path=path, message="Step id must be a non-empty string")]
    return []


def check_retry(count: Any, path: str = "retry") -> list[ValidationIssue]:
    if count is None:
        return []
    if not _is_int(count) or count < 0:
        return [ValidationIssue(path=path, message="Retry count must be a non-negative integer")]
    return []


def check_timeout(ms: Any, path: str = "timeout") -> list[ValidationIssue]:
    if ms is None:
        return []
    if not _is_int(ms) or ms <= 0:
        return [ValidationIssue(path=path, message="Timeout must be a positive integer")]
    return []


def check_callable(fn: Any, path: str, message: str) -> list[ValidationIssue]:
    if fn is None:
        return []
    if not callable(fn):
        return [ValidationIssue(path=path, message=message)]
    return []


class WorkflowValidator:
    """Validate step and workflow definitions."""

    def validate_step(self, step: "Step", path: str = "") -> ValidationResult:
        """Validate a single step.

        Checks:
        - Non-empty string id
        - Callable run function
        - Callable condition (if set)
        - Non-negative integer retry (if set)
        - Positive integer timeout (if set)

        Args:
            step: Step to validate
            path: Prefix for issue paths (e.g. "steps[2]")

        Returns:
            ValidationResult with errors
        """
        prefix = f"{path}." if path else ""
        step_id = getattr(step, "id", None)
        errors = check_step_id(step_id, f"{prefix}id")

        run = getattr(step, "run", None)
        if run is None or not callable(run):
            errors.append(
                ValidationIssue(
                    path=f"{prefix}run",
                    message=f"Step {step_id} must have a run function",
                )
            )

        errors.extend(
            check_callable(
                getattr(step, "condition", None),
                f"{prefix}condition",
                f"Step {step_id} condition must be callable",
            )
        )
        errors.extend(check_retry(getattr(step, "retry", None), f"{prefix}retry"))
        errors.extend(check_timeout(getattr(step, "timeout", None), f"{prefix}timeout"))

        return ValidationResult(valid=not errors, errors=errors)

    def validate(self, name: Any, steps: Sequence["Step"]) -> ValidationResult:
        """Validate a workflow definition.

        Checks:
        - Non-empty string name
        - At least one step
        - Every step valid
        - Unique step ids

        Args:
            name: Workflow name
            steps: Ordered steps

        Returns:
            ValidationResult with errors
        """
        errors: list[ValidationIssue] = []

        if not name or not isinstance(name, str):
            errors.append(
                ValidationIssue(path="name", message="Workflow name must be a non-empty string")
            )

        if not steps:
            errors.append(
                ValidationIssue(path="steps", message="Workflow must have at least one step")
            )
            return ValidationResult(valid=False, errors=errors)

        seen: set[str] = set()
        for index, step in enumerate(steps):
            path = f"steps[{index}]"
            errors.extend(self.validate_step(step, path).errors)

            step_id = getattr(step, "id", None)
            if isinstance(step_id, str) and step_id:
                if step_id in seen:
                    errors.append(
                        ValidationIssue(path=f"{path}.id", message=f"Duplicate step id: {step_id}")
                    )
                seen.add(step_id)

        return ValidationResult(valid=not errors, errors=errors)


def raise_for_result(result: ValidationResult, prefix: str) -> None:
    """Raise WorkflowValidationError if the result has errors."""
    if not result.valid:
        raise WorkflowValidationError.from_issues(result.errors, prefix)
