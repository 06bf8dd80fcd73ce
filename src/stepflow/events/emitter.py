"""Event channel: per-kind listener registry with isolated dispatch."""

import asyncio
import inspect

from stepflow.logging import get_logger

from .types import EventListener, EventType, WorkflowEvent

logger = get_logger("events")


class EventEmitter:
    """
    Register listeners per event kind and broadcast events to them.

    Listeners may be plain or async callables. A listener that raises is
    logged and otherwise ignored; it never affects the emitter's caller.
    """

    def __init__(self) -> None:
        # dict keys keep registration order and give set semantics
        self._listeners: dict[EventType, dict[EventListener, None]] = {}

    def on(self, event_type: EventType | str, listener: EventListener) -> None:
        """Register a listener. Registering the same listener twice is a no-op."""
        kind = EventType(event_type)
        self._listeners.setdefault(kind, {})[listener] = None

    def off(self, event_type: EventType | str, listener: EventListener) -> None:
        """Deregister a listener. Unknown listeners are ignored."""
        kind = EventType(event_type)
        listeners = self._listeners.get(kind)
        if listeners is None:
            return
        listeners.pop(listener, None)
        if not listeners:
            del self._listeners[kind]

    async def emit(self, event: WorkflowEvent) -> None:
        """Dispatch an event to every listener of its kind.

        Returns once every listener invocation has settled.

        Args:
            event: Event to dispatch
        """
        listeners = list(self._listeners.get(event.type, ()))
        if not listeners:
            return
        await asyncio.gather(*(self._invoke(listener, event) for listener in listeners))

    async def _invoke(self, listener: EventListener, event: WorkflowEvent) -> None:
        try:
            result = listener(event)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception(
                f"Error in event listener for {event.type.value}",
                event_type=event.type.value,
                workflow_name=event.workflow_name,
                listener=getattr(listener, "__qualname__", repr(listener)),
            )

    def remove_all_listeners(self, event_type: EventType | str | None = None) -> None:
        """Remove listeners for one kind, or for every kind."""
        if event_type is None:
            self._listeners.clear()
        else:
            self._listeners.pop(EventType(event_type), None)

    def listener_count(self, event_type: EventType | str) -> int:
        return len(self._listeners.get(EventType(event_type), ()))
