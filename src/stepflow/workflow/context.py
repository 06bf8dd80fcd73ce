"""Key/value context shared by the steps of one workflow run."""

import os
from collections.abc import Iterator, Mapping
from typing import Any

from stepflow.errors import WorkflowValidationError
from stepflow.types import ValidationIssue


class WorkflowContext:
    """
    Mutable key/value store plus a snapshot of environment variables.

    One context is created per run and handed by reference to every step.
    Only the currently running step touches it, so there is no locking.
    """

    def __init__(
        self,
        initial_data: Mapping[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
    ):
        """Initialize context.

        Args:
            initial_data: Optional starting values (copied)
            env: Optional extra environment; ``os.environ`` wins on conflicts
        """
        self.data: dict[str, Any] = dict(initial_data or {})
        self.env: dict[str, str] = {**(env or {}), **os.environ}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` if the key is unset."""
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a value.

        Raises:
            WorkflowValidationError: If key is not a non-empty string
        """
        if not key or not isinstance(key, str):
            raise WorkflowValidationError(
                "Context key must be a non-empty string",
                [ValidationIssue(path="key", message="Context key must be a non-empty string")],
            )
        self.data[key] = value

    def has(self, key: str) -> bool:
        return key in self.data

    def delete(self, key: str) -> bool:
        """Remove a key.

        Returns:
            True if the key existed
        """
        if key in self.data:
            del self.data[key]
            return True
        return False

    def clear(self) -> None:
        self.data.clear()

    def clone(self) -> "WorkflowContext":
        """Return an independent copy sharing no mutable storage."""
        copy = WorkflowContext.__new__(WorkflowContext)
        copy.data = dict(self.data)
        copy.env = dict(self.env)
        return copy

    def keys(self) -> list[str]:
        return list(self.data)

    def items(self) -> list[tuple[str, Any]]:
        return list(self.data.items())

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self.data))

    def __repr__(self) -> str:
        return f"WorkflowContext(keys={list(self.data)!r})"
