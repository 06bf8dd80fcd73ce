"""Lifecycle events and the event channel."""

from .emitter import EventEmitter
from .types import (
    EventListener,
    EventType,
    StepFailEvent,
    StepSkipEvent,
    StepStartEvent,
    StepSuccessEvent,
    WorkflowEvent,
    WorkflowFailEvent,
    WorkflowStartEvent,
    WorkflowSuccessEvent,
    error_to_dict,
)

__all__ = [
    "EventEmitter",
    "EventListener",
    "EventType",
    "WorkflowEvent",
    "WorkflowStartEvent",
    "WorkflowSuccessEvent",
    "WorkflowFailEvent",
    "StepStartEvent",
    "StepSuccessEvent",
    "StepFailEvent",
    "StepSkipEvent",
    "error_to_dict",
]
