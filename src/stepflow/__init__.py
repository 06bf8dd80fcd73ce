"""Stepflow - in-process sequential workflow engine.

Run an ordered list of steps over a shared context, with per-step
timeouts, retries with backoff, skip conditions and lifecycle events:

    from stepflow import WorkflowEngine, create_step, define_workflow

    workflow = define_workflow(
        "nightly-report",
        [
            create_step("fetch").run(fetch).retry(3).timeout(10_000).build(),
            create_step("render").run(render).build(),
        ],
    )
    await WorkflowEngine().run(workflow, {"date": "2026-10-18"})
"""

from stepflow.config import ConfigLoader, EngineConfig, RetryPolicy, load_config
from stepflow.engine import WorkflowEngine
from stepflow.errors import (
    StepExecutionError,
    StepTimeoutError,
    WorkflowError,
    WorkflowValidationError,
)
from stepflow.events import EventEmitter, EventType, WorkflowEvent
from stepflow.logging import LogConfig, configure_logging
from stepflow.types import BackoffType
from stepflow.workflow import (
    Step,
    StepBuilder,
    Workflow,
    WorkflowContext,
    create_step,
    define_workflow,
)

__version__ = "0.1.0"
__all__ = [
    "__version__",
    # Engine
    "WorkflowEngine",
    # Definitions
    "Step",
    "StepBuilder",
    "Workflow",
    "WorkflowContext",
    "create_step",
    "define_workflow",
    # Events
    "EventEmitter",
    "EventType",
    "WorkflowEvent",
    # Errors
    "WorkflowError",
    "StepExecutionError",
    "StepTimeoutError",
    "WorkflowValidationError",
    # Configuration
    "EngineConfig",
    "RetryPolicy",
    "BackoffType",
    "ConfigLoader",
    "load_config",
    "LogConfig",
    "configure_logging",
]
