"""Stepflow metrics schema - OpenTelemetry conventions.

Metrics:
- Counters: workflow runs, step executions, step retries
- Histograms: workflow and step durations
- UpDownCounter: active workflow runs

All metrics use the 'stepflow_' prefix.
"""

from dataclasses import dataclass
from typing import Any

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram, UpDownCounter

METRIC_PREFIX = "stepflow"


@dataclass
class MetricLabels:
    """Standard metric labels/attributes."""

    WORKFLOW_NAME = "workflow_name"
    STEP_ID = "step_id"
    STATUS = "status"
    ERROR_CODE = "error_code"

    # Status values
    STATUS_SUCCESS = "success"
    STATUS_ERROR = "error"
    STATUS_SKIPPED = "skipped"


class StepflowMetrics:
    """Metric instruments for workflow runs."""

    def __init__(self, meter: metrics.Meter):
        """Initialize metrics.

        Args:
            meter: OpenTelemetry Meter instance
        """
        self._meter = meter

        self.workflow_runs_total: Counter = meter.create_counter(
            name=f"{METRIC_PREFIX}_workflow_runs_total",
            description="Total number of workflow runs",
            unit="1",
        )
        self.step_executions_total: Counter = meter.create_counter(
            name=f"{METRIC_PREFIX}_step_executions_total",
            description="Total number of step executions",
            unit="1",
        )
        self.step_retries_total: Counter = meter.create_counter(
            name=f"{METRIC_PREFIX}_step_retries_total",
            description="Total number of step retry attempts",
            unit="1",
        )
        self.workflow_duration_seconds: Histogram = meter.create_histogram(
            name=f"{METRIC_PREFIX}_workflow_duration_seconds",
            description="Workflow run duration in seconds",
            unit="s",
        )
        self.step_duration_seconds: Histogram = meter.create_histogram(
            name=f"{METRIC_PREFIX}_step_duration_seconds",
            description="Step execution duration in seconds",
            unit="s",
        )
        self.active_workflows: UpDownCounter = meter.create_up_down_counter(
            name=f"{METRIC_PREFIX}_active_workflows",
            description="Number of currently running workflows",
            unit="1",
        )

    def record_workflow_start(self, workflow_name: str) -> None:
        self.active_workflows.add(1, {MetricLabels.WORKFLOW_NAME: workflow_name})

    def record_workflow_end(
        self,
        workflow_name: str,
        duration_seconds: float,
        status: str,
        error_code: str | None = None,
    ) -> None:
        """Record workflow completion.

        Args:
            workflow_name: Workflow name
            duration_seconds: Run duration
            status: Run status (success, error)
            error_code: Error code if status is error
        """
        labels: dict[str, Any] = {
            MetricLabels.WORKFLOW_NAME: workflow_name,
            MetricLabels.STATUS: status,
        }
        if error_code:
            labels[MetricLabels.ERROR_CODE] = error_code

        self.active_workflows.add(-1, {MetricLabels.WORKFLOW_NAME: workflow_name})
        self.workflow_runs_total.add(1, labels)
        self.workflow_duration_seconds.record(duration_seconds, labels)

    def record_step_execution(
        self,
        workflow_name: str,
        step_id: str,
        duration_seconds: float,
        status: str,
        error_code: str | None = None,
    ) -> None:
        labels: dict[str, Any] = {
            MetricLabels.WORKFLOW_NAME: workflow_name,
            MetricLabels.STEP_ID: step_id,
            MetricLabels.STATUS: status,
        }
        if error_code:
            labels[MetricLabels.ERROR_CODE] = error_code

        self.step_executions_total.add(1, labels)
        self.step_duration_seconds.record(duration_seconds, labels)

    def record_step_retry(self, workflow_name: str, step_id: str) -> None:
        self.step_retries_total.add(
            1,
            {MetricLabels.WORKFLOW_NAME: workflow_name, MetricLabels.STEP_ID: step_id},
        )
