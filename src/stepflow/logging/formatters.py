"""Log formatters: structured JSON and colored terminal output."""

import dataclasses
import json
import logging
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from opentelemetry import trace

from .colors import CYAN, GREEN, LIGHT_BLUE, MAGENTA, RED, RESET, YELLOW

# Attributes every LogRecord carries; anything else came in through `extra`.
_STANDARD_RECORD_FIELDS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "pathname", "process", "processName", "relativeCreated",
        "stack_info", "exc_info", "exc_text", "thread", "threadName",
        "message", "taskName",
    }
)


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Extract the extra fields attached to a log record."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_RECORD_FIELDS
    }


def _jsonable(value: Any) -> Any:
    """Render stepflow values (errors, validation issues, enums) for JSON output."""
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, BaseException):
        return {"type": type(value).__name__, "message": str(value)}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


class StructuredLogFormatter(logging.Formatter):
    """JSON-lines formatter for workflow runs.

    Each line carries timestamp, level, component and message, the
    run/step fields passed as extras (workflow_name, step_id, event,
    duration_ms, ...), and trace_id/span_id when a span is recording.
    Errors and ValidationIssue lists passed as extras are rendered as
    objects; an attached exception is rendered as type, message, code
    (for stepflow errors) and traceback.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            log_data["trace_id"] = format(ctx.trace_id, "032x")
            log_data["span_id"] = format(ctx.span_id, "016x")

        for key, value in record_context(record).items():
            log_data[key] = _jsonable(value)

        if record.exc_info and record.exc_info[1] is not None:
            error = record.exc_info[1]
            log_data["exception"] = {
                "type": type(error).__name__,
                "message": str(error),
                "code": getattr(error, "code", None),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


class ColoredLogFormatter(logging.Formatter):
    """Terminal formatter: ``[COMPONENT] message {context}``."""

    LEVEL_COLORS = {
        logging.DEBUG: LIGHT_BLUE,
        logging.INFO: CYAN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
    }

    def __init__(self, show_context: bool = True, truncate_at: int = 200):
        super().__init__()
        self.show_context = show_context
        self.truncate_at = truncate_at

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        color = self.LEVEL_COLORS.get(record.levelno, RESET)
        if message.endswith("✓"):
            color = GREEN
        component = record.name.rsplit(".", 1)[-1]

        output = f"{MAGENTA}[{component.upper()}]{RESET} {color}{message}{RESET}"

        context = record_context(record)
        if context and self.show_context:
            context_str = str(context)
            if len(context_str) > self.truncate_at:
                context_str = context_str[: self.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)

        return output
