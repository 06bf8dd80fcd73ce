"""Stepflow configuration data models."""

from dataclasses import dataclass, field

from stepflow.logging import LogConfig
from stepflow.telemetry import TelemetryConfig
from stepflow.types import BackoffType


@dataclass
class RetryPolicy:
    """Backoff between a failed attempt and the next retry.

    EXPONENTIAL: min(base * 2**n, max)
    LINEAR:      min(base * (n + 1), max)
    FIXED:       min(base, max)

    where n is the 0-based index of the retry wait.
    """

    backoff: BackoffType = BackoffType.EXPONENTIAL
    base_delay_ms: int = 1000
    max_delay_ms: int = 30000


@dataclass
class EngineConfig:
    """Top-level engine configuration."""

    retry: RetryPolicy = field(default_factory=RetryPolicy)
    logging: LogConfig = field(default_factory=LogConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
