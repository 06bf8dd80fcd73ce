"""Tests for stepflow telemetry instrumentation."""

import pytest
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry import trace
from opentelemetry.trace import StatusCode

from stepflow.engine import WorkflowEngine
from stepflow.errors import StepExecutionError
from stepflow.telemetry import (
    MetricLabels,
    TelemetryConfig,
    get_telemetry,
    instrument_step,
    instrument_workflow,
    setup_telemetry,
)
from stepflow.workflow import create_step, define_workflow


@pytest.fixture
def spans() -> InMemorySpanExporter:
    """Set up telemetry with in-memory span export (no OTEL globals)."""
    exporter = InMemorySpanExporter()
    setup_telemetry(
        TelemetryConfig(metrics_enabled=False), span_exporter=exporter, set_global=False
    )
    return exporter


def metric_points(reader: InMemoryMetricReader) -> dict[str, list]:
    data = reader.get_metrics_data()
    points: dict[str, list] = {}
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points[metric.name] = list(metric.data.data_points)
    return points


class TestInstrumentWithoutSetup:
    """Instrumentation is a no-op until telemetry is set up."""

    @pytest.mark.asyncio
    async def test_yields_result_dict(self):
        assert get_telemetry() is None
        async with instrument_workflow("wf") as result:
            assert result["status"] == MetricLabels.STATUS_SUCCESS

    @pytest.mark.asyncio
    async def test_error_recorded_and_reraised(self):
        with pytest.raises(ValueError):
            async with instrument_step("wf", "s") as result:
                raise ValueError("Test error")
        assert result["status"] == MetricLabels.STATUS_ERROR
        assert result["error_code"] == "ValueError"


class TestSpans:
    """Span creation."""

    @pytest.mark.asyncio
    async def test_step_span_is_child_of_workflow_span(self, spans):
        async with instrument_workflow("wf"):
            async with instrument_step("wf", "s") as result:
                result["attempts"] = 1

        finished = {span.name: span for span in spans.get_finished_spans()}

        assert set(finished) == {"workflow:wf", "step:s"}
        step_span = finished["step:s"]
        assert step_span.parent.span_id == finished["workflow:wf"].context.span_id
        assert step_span.attributes["step.id"] == "s"
        assert step_span.attributes["step.attempts"] == 1

    @pytest.mark.asyncio
    async def test_engine_run_produces_spans(self, spans, fast_config):
        def fail(ctx):
            raise RuntimeError("boom")

        workflow = define_workflow(
            "traced",
            [
                create_step("ok").run(lambda ctx: None).build(),
                create_step("skip").run(lambda ctx: None).condition(lambda ctx: False).build(),
                create_step("bad").run(fail).retry(1).build(),
            ],
        )

        with pytest.raises(StepExecutionError):
            await WorkflowEngine(config=fast_config).run(workflow)

        finished = {span.name: span for span in spans.get_finished_spans()}

        assert finished["workflow:traced"].status.status_code == StatusCode.ERROR
        assert finished["step:ok"].status.status_code == StatusCode.OK
        assert finished["step:skip"].attributes["step.skipped"] is True
        assert finished["step:bad"].status.status_code == StatusCode.ERROR
        assert finished["step:bad"].attributes["step.attempts"] == 2

    @pytest.mark.asyncio
    async def test_step_bodies_run_inside_step_span(self, spans, engine):
        """Test sync and async bodies both see their step span as current."""
        seen: dict[str, int] = {}

        async def async_body(ctx):
            seen["async"] = trace.get_current_span().get_span_context().span_id

        def sync_body(ctx):
            seen["sync"] = trace.get_current_span().get_span_context().span_id

        workflow = define_workflow(
            "traced-bodies",
            [
                create_step("async").run(async_body).build(),
                create_step("sync").run(sync_body).build(),
            ],
        )
        await engine.run(workflow)

        finished = {span.name: span for span in spans.get_finished_spans()}

        assert seen["async"] == finished["step:async"].context.span_id
        assert seen["sync"] == finished["step:sync"].context.span_id


class TestMetrics:
    """Metric recording."""

    @pytest.mark.asyncio
    async def test_engine_records_metrics(self, fast_config):
        reader = InMemoryMetricReader()
        setup_telemetry(
            TelemetryConfig(traces_enabled=False), metric_readers=[reader], set_global=False
        )
        attempts = 0

        def flaky(ctx):
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise RuntimeError("first")

        workflow = define_workflow("measured", [create_step("s").run(flaky).retry(2).build()])
        await WorkflowEngine(config=fast_config).run(workflow)

        points = metric_points(reader)

        assert points["stepflow_workflow_runs_total"][0].value == 1
        assert points["stepflow_step_executions_total"][0].value == 1
        assert points["stepflow_step_retries_total"][0].value == 1
        assert points["stepflow_workflow_runs_total"][0].attributes["status"] == "success"

    def test_disabled_telemetry(self):
        telemetry = setup_telemetry(TelemetryConfig(enabled=False))
        assert telemetry["tracer"] is None
        assert telemetry["metrics"] is None
