"""Stepflow logger - hierarchical lifecycle logging for workflow runs."""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

from stepflow.types import LogFormat, LogLevel

from .formatters import ColoredLogFormatter, StructuredLogFormatter

ROOT_LOGGER_NAME = "stepflow"

_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_context: bool = True
    truncate_at: int = 200
    output: TextIO = field(default=sys.stderr)


class StepflowLogger:
    """Thin wrapper around a stdlib logger that takes context as kwargs.

    Usage:
        logger = get_logger("engine")
        logger.info("Workflow started", workflow_name="etl")
    """

    def __init__(self, name: str):
        """Initialize logger.

        Args:
            name: Component name, prefixed with ``stepflow.``
        """
        self._logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")

    @property
    def name(self) -> str:
        return self._logger.name

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        self._logger.log(level, message, extra=kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log error message with the active exception's traceback."""
        self._logger.exception(message, extra=kwargs)


# Logger cache
_loggers: dict[str, StepflowLogger] = {}


def get_logger(name: str) -> StepflowLogger:
    """Get or create a component logger.

    Args:
        name: Component name (engine, events, config, ...)

    Returns:
        StepflowLogger instance
    """
    if name not in _loggers:
        _loggers[name] = StepflowLogger(name)
    return _loggers[name]


def reset_loggers() -> None:
    """Reset logger cache (for testing)."""
    global _loggers
    _loggers = {}


def configure_logging(config: LogConfig | None = None) -> logging.Handler:
    """Install a single handler on the ``stepflow`` logger.

    The library installs no handler on import; host applications call this
    (or configure ``logging`` themselves).

    Args:
        config: Logging configuration (defaults to LogConfig())

    Returns:
        The installed handler
    """
    config = config or LogConfig()

    handler = logging.StreamHandler(config.output)
    if config.format == LogFormat.JSON:
        handler.setFormatter(StructuredLogFormatter())
    else:
        handler.setFormatter(
            ColoredLogFormatter(show_context=config.show_context, truncate_at=config.truncate_at)
        )

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers = [handler]
    root.setLevel(_LEVELS[config.level])
    root.propagate = False
    return handler


class RunLogger:
    """Logger for workflow-level events of one run."""

    def __init__(self, workflow_name: str, logger: StepflowLogger | None = None):
        """Initialize run logger.

        Args:
            workflow_name: Workflow being run
            logger: Underlying component logger (defaults to ``stepflow.workflow``)
        """
        self.workflow_name = workflow_name
        self.logger = logger or get_logger("workflow")

    def started(self, step_count: int) -> None:
        """Log workflow start."""
        self.logger.info(
            f"Workflow '{self.workflow_name}' started ({step_count} steps)",
            workflow_name=self.workflow_name,
            event="workflow_started",
            step_count=step_count,
        )

    def completed(self, duration_ms: int) -> None:
        """Log workflow completion.

        Args:
            duration_ms: Run duration in milliseconds
        """
        duration_s = duration_ms / 1000
        self.logger.info(
            f"Workflow '{self.workflow_name}' completed ({duration_s:.2f}s) ✓",
            workflow_name=self.workflow_name,
            event="workflow_completed",
            duration_ms=duration_ms,
        )

    def failed(self, error: BaseException, duration_ms: int) -> None:
        """Log workflow failure.

        Args:
            error: Exception that aborted the run
            duration_ms: Run duration in milliseconds
        """
        duration_s = duration_ms / 1000
        self.logger.error(
            f"Workflow '{self.workflow_name}' failed ({duration_s:.2f}s): {error}",
            workflow_name=self.workflow_name,
            event="workflow_failed",
            duration_ms=duration_ms,
            error=str(error),
            error_type=type(error).__name__,
            error_code=getattr(error, "code", None),
        )

    def step(self, step_id: str) -> "StepLogger":
        """Get a logger scoped to a step."""
        return StepLogger(self, step_id)


class StepLogger:
    """Logger for step-level events."""

    def __init__(self, parent: RunLogger, step_id: str):
        self.parent = parent
        self.step_id = step_id

    def _context(self, event: str, **kwargs: Any) -> dict[str, Any]:
        return {
            "workflow_name": self.parent.workflow_name,
            "step_id": self.step_id,
            "event": event,
            **kwargs,
        }

    def started(self) -> None:
        self.parent.logger.info(
            f"Step '{self.step_id}' started",
            **self._context("step_started"),
        )

    def completed(self, duration_ms: int, attempts: int) -> None:
        """Log step completion.

        Args:
            duration_ms: Step duration in milliseconds
            attempts: Number of attempts it took
        """
        duration_s = duration_ms / 1000
        message = f"Step '{self.step_id}' completed ({duration_s:.2f}s) ✓"
        if attempts > 1:
            message = (
                f"Step '{self.step_id}' completed after {attempts} attempts ({duration_s:.2f}s) ✓"
            )
        self.parent.logger.info(
            message,
            **self._context("step_completed", duration_ms=duration_ms, attempts=attempts),
        )

    def skipped(self, reason: str) -> None:
        self.parent.logger.info(
            f"Step '{self.step_id}' skipped: {reason}",
            **self._context("step_skipped", reason=reason),
        )

    def failed(self, error: BaseException, duration_ms: int) -> None:
        self.parent.logger.error(
            f"Step '{self.step_id}' failed: {error}",
            **self._context(
                "step_failed",
                duration_ms=duration_ms,
                error=str(error),
                error_type=type(error).__name__,
                error_code=getattr(error, "code", None),
            ),
        )

    def retrying(
        self,
        attempt: int,
        max_attempts: int,
        delay_ms: int,
        error: BaseException,
    ) -> None:
        """Log retry attempt.

        Args:
            attempt: Attempt that just failed (1-based)
            max_attempts: Maximum number of attempts
            delay_ms: Backoff delay before the next attempt
            error: Error of the failed attempt
        """
        self.parent.logger.warning(
            f"Step '{self.step_id}' retrying "
            f"(attempt {attempt}/{max_attempts}, delay: {delay_ms}ms): {error}",
            **self._context(
                "step_retrying",
                attempt=attempt,
                max_attempts=max_attempts,
                delay_ms=delay_ms,
                error=str(error),
            ),
        )
