"""
Pytest configuration and shared fixtures for stepflow tests.
"""

import logging
import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stepflow.config import EngineConfig, RetryPolicy  # noqa: E402
from stepflow.engine import WorkflowEngine  # noqa: E402
from stepflow.events import EventType, WorkflowEvent  # noqa: E402
from stepflow.logging import reset_loggers  # noqa: E402
from stepflow.telemetry import reset_telemetry  # noqa: E402

# =============================================================================
# State Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset logger cache and telemetry state around each test."""
    reset_loggers()
    reset_telemetry()
    yield
    reset_loggers()
    reset_telemetry()


@pytest.fixture
def restore_stepflow_logger() -> Generator[None, None, None]:
    """Undo configure_logging() changes to the stepflow logger."""
    root = logging.getLogger("stepflow")
    handlers, level, propagate = root.handlers[:], root.level, root.propagate
    yield
    root.handlers, root.level, root.propagate = handlers, level, propagate


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def fast_config() -> EngineConfig:
    """Engine config with zero backoff so retry tests don't sleep."""
    return EngineConfig(retry=RetryPolicy(base_delay_ms=0, max_delay_ms=0))


@pytest.fixture
def engine(fast_config: EngineConfig) -> WorkflowEngine:
    """Engine with zero backoff."""
    return WorkflowEngine(config=fast_config)


@pytest.fixture
def event_log(engine: WorkflowEngine) -> list[WorkflowEvent]:
    """Every event the ``engine`` fixture emits, in order."""
    events: list[WorkflowEvent] = []
    for kind in EventType:
        engine.on(kind, events.append)
    return events


@pytest.fixture
def event_kinds(event_log: list[WorkflowEvent]) -> Callable[[], list[str]]:
    """Render the event log as ``kind`` or ``kind:step_id`` strings."""

    def _kinds() -> list[str]:
        rendered = []
        for event in event_log:
            step_id: Any = getattr(event, "step_id", None)
            rendered.append(f"{event.type.value}:{step_id}" if step_id else event.type.value)
        return rendered

    return _kinds


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Slow tests")
