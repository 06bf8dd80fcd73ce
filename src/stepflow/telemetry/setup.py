"""Stepflow telemetry setup - OpenTelemetry initialization.

Configures the OpenTelemetry SDK with:
- MeterProvider (metric readers supplied by the host, if any)
- TracerProvider with an optional OTLP span exporter
"""

from dataclasses import dataclass, field
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter, SimpleSpanProcessor

from .metrics import StepflowMetrics


@dataclass
class OTLPExporterConfig:
    """OTLP exporter configuration.

    Attributes:
        enabled: Whether OTLP export is enabled
        endpoint: OTLP collector endpoint
        insecure: Whether to use insecure connection
        protocol: Protocol (grpc or http)
        headers: Additional headers
    """

    enabled: bool = False
    endpoint: str = "http://localhost:4317"
    insecure: bool = True
    protocol: str = "grpc"  # grpc | http
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class TelemetryConfig:
    """Telemetry configuration.

    Attributes:
        enabled: Whether telemetry is enabled
        service_name: Service name for telemetry
        service_version: Service version
        metrics_enabled: Whether metrics are recorded
        traces_enabled: Whether spans are recorded
        otlp: OTLP exporter configuration
    """

    enabled: bool = True
    service_name: str = "stepflow"
    service_version: str = "0.1.0"
    metrics_enabled: bool = True
    traces_enabled: bool = True
    otlp: OTLPExporterConfig = field(default_factory=OTLPExporterConfig)

    # Additional attributes for OTEL resource
    attributes: dict[str, str] = field(default_factory=dict)


# Global telemetry state
_telemetry: dict[str, Any] | None = None


def _create_otlp_span_exporter(otlp_config: OTLPExporterConfig) -> SpanExporter:
    """Create OTLP span exporter based on configuration.

    The exporter packages are optional (``stepflow[otlp]``).
    """
    if otlp_config.protocol == "http":
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        return OTLPSpanExporter(
            endpoint=f"{otlp_config.endpoint}/v1/traces",
            headers=otlp_config.headers or None,
        )

    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
        OTLPSpanExporter as GrpcOTLPSpanExporter,
    )

    return GrpcOTLPSpanExporter(
        endpoint=otlp_config.endpoint,
        insecure=otlp_config.insecure,
        headers=otlp_config.headers or None,
    )


def setup_telemetry(
    config: TelemetryConfig | None = None,
    span_exporter: SpanExporter | None = None,
    metric_readers: list[MetricReader] | None = None,
    set_global: bool = True,
) -> dict[str, Any]:
    """Set up OpenTelemetry instrumentation.

    Args:
        config: Telemetry configuration (uses defaults if None)
        span_exporter: Extra exporter, attached with a SimpleSpanProcessor
        metric_readers: Metric readers for the MeterProvider
        set_global: Whether to install the providers as OTEL globals

    Returns:
        Dictionary with meter, tracer and metrics instances
    """
    global _telemetry

    if _telemetry is not None:
        return _telemetry

    config = config or TelemetryConfig()

    if not config.enabled:
        _telemetry = {"meter": None, "tracer": None, "metrics": None, "config": config}
        return _telemetry

    resource = Resource.create(
        {
            SERVICE_NAME: config.service_name,
            SERVICE_VERSION: config.service_version,
            **config.attributes,
        }
    )

    tracer = None
    tracer_provider = None
    if config.traces_enabled:
        tracer_provider = TracerProvider(resource=resource)
        if config.otlp.enabled:
            tracer_provider.add_span_processor(
                BatchSpanProcessor(_create_otlp_span_exporter(config.otlp))
            )
        if span_exporter is not None:
            tracer_provider.add_span_processor(SimpleSpanProcessor(span_exporter))
        if set_global:
            trace.set_tracer_provider(tracer_provider)
        tracer = tracer_provider.get_tracer(config.service_name, config.service_version)

    meter = None
    meter_provider = None
    stepflow_metrics = None
    if config.metrics_enabled:
        meter_provider = MeterProvider(metric_readers=metric_readers or [], resource=resource)
        if set_global:
            metrics.set_meter_provider(meter_provider)
        meter = meter_provider.get_meter(config.service_name, config.service_version)
        stepflow_metrics = StepflowMetrics(meter)

    _telemetry = {
        "meter": meter,
        "tracer": tracer,
        "metrics": stepflow_metrics,
        "config": config,
        "tracer_provider": tracer_provider,
        "meter_provider": meter_provider,
    }
    return _telemetry


def get_telemetry() -> dict[str, Any] | None:
    """Get the current telemetry instance.

    Returns:
        Telemetry dictionary or None if not initialized
    """
    return _telemetry


def reset_telemetry() -> None:
    """Reset telemetry state (for testing)."""
    global _telemetry
    _telemetry = None
