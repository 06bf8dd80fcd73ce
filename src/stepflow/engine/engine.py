"""Workflow engine for running workflows."""

import asyncio
import time
from pathlib import Path
from typing import Any

from stepflow.config import EngineConfig, load_config
from stepflow.errors import StepTimeoutError, wrap_step_error
from stepflow.events import (
    EventEmitter,
    EventListener,
    EventType,
    StepFailEvent,
    StepSkipEvent,
    StepStartEvent,
    StepSuccessEvent,
    WorkflowEvent,
    WorkflowFailEvent,
    WorkflowStartEvent,
    WorkflowSuccessEvent,
)
from stepflow.logging import (
    RunLogger,
    StepflowLogger,
    StepLogger,
    configure_logging,
    get_logger,
)
from stepflow.telemetry import (
    MetricLabels,
    instrument_step,
    instrument_workflow,
    record_retry,
    setup_telemetry,
)
from stepflow.workflow import Step, Workflow, WorkflowContext

from .types import calculate_retry_delay, elapsed_ms, invoke, with_timeout


class WorkflowEngine:
    """
    Run workflows one step at a time.

    Core loop:
    1. Build a fresh context from the initial data
    2. For each step in order:
       a. Evaluate the condition (skip if falsy)
       b. Run the body, bounded by the step timeout
       c. Retry non-timeout failures with backoff
       d. Emit success/fail events
    3. Stop at the first unrecovered failure and re-raise it

    Events are dispatched through the engine's own EventEmitter; each
    emission is fully awaited before the run continues.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        logger: StepflowLogger | None = None,
        emitter: EventEmitter | None = None,
    ):
        """Initialize workflow engine.

        Args:
            config: Engine configuration (defaults to EngineConfig())
            logger: Optional logger (defaults to the ``stepflow.engine`` logger)
            emitter: Optional event channel to share between engines
        """
        self._config = config or EngineConfig()
        self._logger = logger or get_logger("engine")
        self._emitter = emitter or EventEmitter()

    @classmethod
    def from_config(
        cls,
        config: EngineConfig | str | Path | None = None,
        emitter: EventEmitter | None = None,
    ) -> "WorkflowEngine":
        """Build an engine and apply the logging and telemetry sections.

        Steps:
        1. Load configuration (a path or None goes through load_config)
        2. Install the ``stepflow`` log handler from ``config.logging``
        3. Set up telemetry from ``config.telemetry``

        setup_telemetry() only takes effect once per process; later calls
        keep the first telemetry state.

        Args:
            config: EngineConfig, or a YAML path to load one from
            emitter: Optional event channel to share between engines

        Returns:
            Configured WorkflowEngine
        """
        if not isinstance(config, EngineConfig):
            config = load_config(config)

        configure_logging(config.logging)
        setup_telemetry(config.telemetry)
        return cls(config=config, emitter=emitter)

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def events(self) -> EventEmitter:
        return self._emitter

    def on(self, event_type: EventType | str, listener: EventListener) -> None:
        """Register a lifecycle event listener."""
        self._emitter.on(event_type, listener)

    def off(self, event_type: EventType | str, listener: EventListener) -> None:
        """Deregister a lifecycle event listener."""
        self._emitter.off(event_type, listener)

    async def run(
        self,
        workflow: Workflow,
        initial_data: dict[str, Any] | None = None,
    ) -> None:
        """
        Run a workflow to completion.

        Args:
            workflow: Workflow to run
            initial_data: Optional starting context values

        Raises:
            StepExecutionError: If a step failed after its retries
            StepTimeoutError: If a step attempt timed out
        """
        context = WorkflowContext(initial_data)
        run_logger = RunLogger(workflow.name, self._logger)
        started = time.monotonic()

        async with instrument_workflow(workflow.name):
            await self._emit(WorkflowStartEvent(workflow_name=workflow.name))
            run_logger.started(len(workflow.steps))

            try:
                for step in workflow.steps:
                    await self._execute_step(step, workflow.name, context, run_logger)
            except Exception as error:
                run_logger.failed(error, elapsed_ms(started))
                await self._emit(WorkflowFailEvent(workflow_name=workflow.name, error=error))
                raise

            run_logger.completed(elapsed_ms(started))
            await self._emit(WorkflowSuccessEvent(workflow_name=workflow.name))

    async def _execute_step(
        self,
        step: Step,
        workflow_name: str,
        context: WorkflowContext,
        run_logger: RunLogger,
    ) -> None:
        """
        Run one step through its lifecycle.

        Handles:
        - Condition check (skip)
        - Timeout-bounded attempts with retry
        - Success/fail events
        - Error classification

        Args:
            step: Step to run
            workflow_name: Name of the running workflow
            context: Run context
            run_logger: Logger for this run
        """
        step_logger = run_logger.step(step.id)
        started = time.monotonic()

        async with instrument_step(workflow_name, step.id) as telemetry_result:
            try:
                if step.condition is not None:
                    should_run = await invoke(step.condition, context)
                    if not should_run:
                        telemetry_result["status"] = MetricLabels.STATUS_SKIPPED
                        step_logger.skipped("condition evaluated to false")
                        await self._emit(
                            StepSkipEvent(workflow_name=workflow_name, step_id=step.id)
                        )
                        return

                await self._emit(StepStartEvent(workflow_name=workflow_name, step_id=step.id))
                started = time.monotonic()
                step_logger.started()

                attempts = await self._execute_with_retry(
                    step, workflow_name, context, step_logger, telemetry_result
                )
            except Exception as error:
                duration = elapsed_ms(started)
                step_logger.failed(error, duration)
                await self._emit(
                    StepFailEvent(
                        workflow_name=workflow_name,
                        step_id=step.id,
                        error=error,
                        duration=duration,
                    )
                )

                wrapped = wrap_step_error(error, step.id, workflow_name)
                if wrapped is error:
                    raise
                raise wrapped from error

            duration = elapsed_ms(started)
            step_logger.completed(duration, attempts)
            await self._emit(
                StepSuccessEvent(workflow_name=workflow_name, step_id=step.id, duration=duration)
            )

    async def _execute_with_retry(
        self,
        step: Step,
        workflow_name: str,
        context: WorkflowContext,
        step_logger: StepLogger,
        telemetry_result: dict[str, Any],
    ) -> int:
        """Attempt a step up to ``step.retry + 1`` times.

        Timeouts are never retried: a hung step points at a systemic
        problem, not a transient one.

        Returns:
            Number of attempts it took to succeed

        Raises:
            StepTimeoutError: On the first timed-out attempt
            Exception: The last attempt's error once retries are exhausted
        """
        max_attempts = step.max_attempts

        for attempt in range(max_attempts):
            telemetry_result["attempts"] = attempt + 1
            try:
                await self._execute_attempt(step, workflow_name, context)
                return attempt + 1
            except StepTimeoutError:
                raise
            except Exception as error:
                if attempt == max_attempts - 1:
                    raise

                delay_ms = calculate_retry_delay(attempt, self._config.retry)
                step_logger.retrying(attempt + 1, max_attempts, delay_ms, error)
                record_retry(workflow_name, step.id)
                await asyncio.sleep(delay_ms / 1000)

        return max_attempts

    async def _execute_attempt(
        self,
        step: Step,
        workflow_name: str,
        context: WorkflowContext,
    ) -> None:
        """Run the step body once, racing the timer if a timeout is set."""
        body = invoke(step.run, context, offload=True)
        if step.timeout is None:
            await body
            return
        await with_timeout(body, step.timeout, step.id, workflow_name)

    async def _emit(self, event: WorkflowEvent) -> None:
        await self._emitter.emit(event)
