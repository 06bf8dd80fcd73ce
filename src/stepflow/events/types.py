"""Lifecycle event types."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar


class EventType(str, Enum):
    """Lifecycle event kinds."""

    WORKFLOW_START = "workflow:start"
    WORKFLOW_SUCCESS = "workflow:success"
    WORKFLOW_FAIL = "workflow:fail"
    STEP_START = "step:start"
    STEP_SUCCESS = "step:success"
    STEP_FAIL = "step:fail"
    STEP_SKIP = "step:skip"


def _now() -> datetime:
    return datetime.now(UTC)


def error_to_dict(error: BaseException) -> dict[str, Any]:
    """Render an error for event payloads."""
    to_dict = getattr(error, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return {"type": type(error).__name__, "message": str(error)}


@dataclass(frozen=True, kw_only=True)
class WorkflowEvent:
    """Base event: every kind carries the workflow name and a timestamp."""

    type: ClassVar[EventType]

    workflow_name: str
    timestamp: datetime = field(default_factory=_now)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for listeners that forward events elsewhere."""
        data: dict[str, Any] = {"type": self.type.value}
        for name, value in self.__dict__.items():
            if isinstance(value, datetime):
                data[name] = value.isoformat()
            elif isinstance(value, BaseException):
                data[name] = error_to_dict(value)
            else:
                data[name] = value
        return data


@dataclass(frozen=True, kw_only=True)
class WorkflowStartEvent(WorkflowEvent):
    type: ClassVar[EventType] = EventType.WORKFLOW_START


@dataclass(frozen=True, kw_only=True)
class WorkflowSuccessEvent(WorkflowEvent):
    type: ClassVar[EventType] = EventType.WORKFLOW_SUCCESS


@dataclass(frozen=True, kw_only=True)
class WorkflowFailEvent(WorkflowEvent):
    type: ClassVar[EventType] = EventType.WORKFLOW_FAIL

    error: BaseException


@dataclass(frozen=True, kw_only=True)
class StepStartEvent(WorkflowEvent):
    type: ClassVar[EventType] = EventType.STEP_START

    step_id: str


@dataclass(frozen=True, kw_only=True)
class StepSuccessEvent(WorkflowEvent):
    type: ClassVar[EventType] = EventType.STEP_SUCCESS

    step_id: str
    duration: int  # milliseconds


@dataclass(frozen=True, kw_only=True)
class StepFailEvent(WorkflowEvent):
    type: ClassVar[EventType] = EventType.STEP_FAIL

    step_id: str
    error: BaseException
    duration: int | None = None  # milliseconds


@dataclass(frozen=True, kw_only=True)
class StepSkipEvent(WorkflowEvent):
    type: ClassVar[EventType] = EventType.STEP_SKIP

    step_id: str


EventListener = Callable[[WorkflowEvent], None | Awaitable[None]]
