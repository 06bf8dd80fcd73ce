"""Stepflow telemetry instrumentation helpers.

Provides async context managers for:
- Workflow runs
- Step executions

Both are no-ops until setup_telemetry() has been called.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .metrics import MetricLabels
from .setup import get_telemetry


def _components() -> tuple[Any, Any]:
    telemetry = get_telemetry()
    if not telemetry:
        return None, None
    return telemetry["tracer"], telemetry["metrics"]


def _fail_span(span: Any, error: BaseException) -> None:
    if span is not None:
        span.set_status(Status(StatusCode.ERROR, str(error)))
        span.record_exception(error)


@asynccontextmanager
async def instrument_workflow(workflow_name: str) -> AsyncIterator[dict[str, Any]]:
    """Context manager for instrumenting a workflow run.

    Records:
    - Active workflow gauge
    - Workflow run counter and duration histogram
    - Trace span for the run (current for the duration of the block)

    Args:
        workflow_name: Workflow name

    Yields:
        Dictionary to store run status
    """
    tracer, metrics = _components()
    start_time = time.monotonic()
    result: dict[str, Any] = {"status": MetricLabels.STATUS_SUCCESS, "error_code": None}

    span = None
    if tracer:
        span = tracer.start_span(f"workflow:{workflow_name}")
        span.set_attribute("workflow.name", workflow_name)

    if metrics:
        metrics.record_workflow_start(workflow_name)

    try:
        if span is not None:
            with trace.use_span(
                span, end_on_exit=False, record_exception=False, set_status_on_exception=False
            ):
                yield result
        else:
            yield result
    except Exception as e:
        result["status"] = MetricLabels.STATUS_ERROR
        result["error_code"] = getattr(e, "code", type(e).__name__)
        _fail_span(span, e)
        raise
    finally:
        duration = time.monotonic() - start_time

        if metrics:
            metrics.record_workflow_end(
                workflow_name=workflow_name,
                duration_seconds=duration,
                status=result["status"],
                error_code=result.get("error_code"),
            )

        if span is not None:
            if result["status"] == MetricLabels.STATUS_SUCCESS:
                span.set_status(Status(StatusCode.OK))
            span.end()


@asynccontextmanager
async def instrument_step(workflow_name: str, step_id: str) -> AsyncIterator[dict[str, Any]]:
    """Context manager for instrumenting a step execution.

    Records:
    - Step execution counter and duration histogram
    - Trace span for the step, child of the workflow span

    Args:
        workflow_name: Workflow name
        step_id: Step identifier

    Yields:
        Dictionary to store step status and attempt count
    """
    tracer, metrics = _components()
    start_time = time.monotonic()
    result: dict[str, Any] = {
        "status": MetricLabels.STATUS_SUCCESS,
        "error_code": None,
        "attempts": 0,
    }

    span = None
    if tracer:
        span = tracer.start_span(f"step:{step_id}")
        span.set_attribute("workflow.name", workflow_name)
        span.set_attribute("step.id", step_id)

    try:
        if span is not None:
            with trace.use_span(
                span, end_on_exit=False, record_exception=False, set_status_on_exception=False
            ):
                yield result
        else:
            yield result
    except Exception as e:
        result["status"] = MetricLabels.STATUS_ERROR
        result["error_code"] = getattr(e, "code", type(e).__name__)
        _fail_span(span, e)
        raise
    finally:
        duration = time.monotonic() - start_time

        if metrics:
            metrics.record_step_execution(
                workflow_name=workflow_name,
                step_id=step_id,
                duration_seconds=duration,
                status=result["status"],
                error_code=result.get("error_code"),
            )

        if span is not None:
            span.set_attribute("step.attempts", result["attempts"])
            if result["status"] == MetricLabels.STATUS_SKIPPED:
                span.set_attribute("step.skipped", True)
            if result["status"] != MetricLabels.STATUS_ERROR:
                span.set_status(Status(StatusCode.OK))
            span.end()


def record_retry(workflow_name: str, step_id: str) -> None:
    """Count a retry attempt, if metrics are set up."""
    _, metrics = _components()
    if metrics:
        metrics.record_step_retry(workflow_name, step_id)
