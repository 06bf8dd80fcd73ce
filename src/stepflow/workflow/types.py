"""Workflow data model types."""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .context import WorkflowContext
from .validator import WorkflowValidator, raise_for_result

StepFunction = Callable[[WorkflowContext], Any]
ConditionFunction = Callable[[WorkflowContext], bool | Awaitable[bool]]


@dataclass(frozen=True)
class Step:
    """Executable unit of work.

    ``run`` and ``condition`` may be plain or async callables.
    """

    id: str
    run: StepFunction
    condition: ConditionFunction | None = None

    # Retry count (extra attempts after the first)
    retry: int | None = None

    # Timeout per attempt, in milliseconds
    timeout: int | None = None

    def __post_init__(self) -> None:
        raise_for_result(
            WorkflowValidator().validate_step(self),
            f"Invalid step {self.id!r}",
        )

    @property
    def max_attempts(self) -> int:
        """Total number of attempts the retry policy allows."""
        return (self.retry or 0) + 1


@dataclass(frozen=True, init=False)
class Workflow:
    """Named, ordered, immutable sequence of steps."""

    name: str
    steps: tuple[Step, ...]

    def __init__(self, name: str, steps: Sequence[Step]):
        """Build and validate a workflow.

        Args:
            name: Non-empty workflow name
            steps: At least one step, with unique ids

        Raises:
            WorkflowValidationError: If the definition is invalid
        """
        steps = tuple(steps) if steps is not None else ()
        raise_for_result(
            WorkflowValidator().validate(name, steps),
            f"Invalid workflow {name!r}",
        )
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "steps", steps)

    def get_step(self, step_id: str) -> Step | None:
        """Get step by ID."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    @property
    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]

    def __len__(self) -> int:
        return len(self.steps)


def define_workflow(name: str, steps: Sequence[Step]) -> Workflow:
    """Define a workflow from a name and ordered steps."""
    return Workflow(name, steps)
