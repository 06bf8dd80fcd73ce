"""Stepflow telemetry - OpenTelemetry-based tracing and metrics."""

from .instrumentation import (
    instrument_step,
    instrument_workflow,
    record_retry,
)
from .metrics import MetricLabels, StepflowMetrics
from .setup import (
    OTLPExporterConfig,
    TelemetryConfig,
    get_telemetry,
    reset_telemetry,
    setup_telemetry,
)

__all__ = [
    # Metrics
    "StepflowMetrics",
    "MetricLabels",
    # Setup
    "TelemetryConfig",
    "OTLPExporterConfig",
    "setup_telemetry",
    "get_telemetry",
    "reset_telemetry",
    # Instrumentation
    "instrument_workflow",
    "instrument_step",
    "record_retry",
]
