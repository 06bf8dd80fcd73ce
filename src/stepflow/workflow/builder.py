"""Fluent step builder."""

from typing import Any

from stepflow.errors import WorkflowValidationError
from stepflow.types import ValidationIssue

from .types import ConditionFunction, Step, StepFunction
from .validator import check_callable, check_retry, check_step_id, check_timeout


def _raise_first(issues: list[ValidationIssue]) -> None:
    if issues:
        raise WorkflowValidationError(issues[0].message, issues)


class StepBuilder:
    """
    Build a Step one option at a time.

    Every setter validates immediately, so a bad value fails at the line
    that supplied it:

        step = (
            create_step("fetch")
            .run(fetch_orders)
            .retry(3)
            .timeout(5_000)
            .build()
        )
    """

    def __init__(self, step_id: str):
        _raise_first(check_step_id(step_id))
        self._id = step_id
        self._run: StepFunction | None = None
        self._condition: ConditionFunction | None = None
        self._retry: int | None = None
        self._timeout: int | None = None

    def run(self, fn: StepFunction) -> "StepBuilder":
        _raise_first(check_callable(fn, "run", f"Step {self._id} run function must be callable"))
        self._run = fn
        return self

    def condition(self, fn: ConditionFunction) -> "StepBuilder":
        _raise_first(
            check_callable(fn, "condition", f"Step {self._id} condition must be callable")
        )
        self._condition = fn
        return self

    def retry(self, count: int) -> "StepBuilder":
        """Allow ``count`` extra attempts after the first failure."""
        _raise_first(check_retry(count))
        self._retry = count
        return self

    def timeout(self, ms: int) -> "StepBuilder":
        """Bound each attempt to ``ms`` milliseconds."""
        _raise_first(check_timeout(ms))
        self._timeout = ms
        return self

    def build(self) -> Step:
        """Create the immutable Step.

        Raises:
            WorkflowValidationError: If no run function was given
        """
        if self._run is None:
            raise WorkflowValidationError(f"Step {self._id} must have a run function")
        return Step(
            id=self._id,
            run=self._run,
            condition=self._condition,
            retry=self._retry,
            timeout=self._timeout,
        )

    def __repr__(self) -> str:
        options: dict[str, Any] = {"retry": self._retry, "timeout": self._timeout}
        return f"StepBuilder({self._id!r}, {options})"


def create_step(step_id: str) -> StepBuilder:
    """Start building a step with the given id."""
    return StepBuilder(step_id)
