"""Helpers for the workflow engine: timing, backoff and timeouts."""

import asyncio
import contextvars
import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from stepflow.config import RetryPolicy
from stepflow.errors import StepTimeoutError
from stepflow.types import BackoffType

T = TypeVar("T")


def elapsed_ms(started: float) -> int:
    """Milliseconds since a ``time.monotonic()`` reading."""
    return int((time.monotonic() - started) * 1000)


def calculate_retry_delay(attempt_index: int, policy: RetryPolicy) -> int:
    """Calculate delay (ms) before the next retry attempt.

    Args:
        attempt_index: 0 for the first retry wait, 1 for the second, ...
        policy: Backoff policy

    Returns:
        Delay in milliseconds, never above policy.max_delay_ms
    """
    if policy.backoff == BackoffType.FIXED:
        delay = policy.base_delay_ms
    elif policy.backoff == BackoffType.LINEAR:
        delay = policy.base_delay_ms * (attempt_index + 1)
    else:
        # Exponential backoff: delay = base * (2 ^ attempt_index)
        delay = policy.base_delay_ms * (2**attempt_index)

    return min(delay, policy.max_delay_ms)


async def invoke(fn: Callable[..., Any], *args: Any, offload: bool = False) -> Any:
    """Call a plain or async callable and return its (awaited) result.

    Args:
        fn: Callable to invoke
        *args: Positional arguments
        offload: Run plain callables in the default executor

    Returns:
        The callable's result
    """
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)

    if offload:
        loop = asyncio.get_running_loop()
        # Carry contextvars (the current span) into the worker thread
        ctx = contextvars.copy_context()
        result = await loop.run_in_executor(None, ctx.run, fn, *args)
    else:
        result = fn(*args)

    if inspect.isawaitable(result):
        return await result
    return result


async def with_timeout(
    coro: Awaitable[T],
    timeout_ms: int,
    step_id: str,
    workflow_name: str,
) -> T:
    """Race an awaitable against a timer.

    The awaitable runs as its own task so that an exception it raises is
    never confused with the timer firing. On timeout the task is cancelled
    and its outcome ignored.

    Raises:
        StepTimeoutError: If the timer fires first
    """
    task = asyncio.ensure_future(coro)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    task.cancel()
    # Late outcome is discarded; retrieve it so asyncio doesn't warn.
    task.add_done_callback(lambda t: t.cancelled() or t.exception())
    raise StepTimeoutError(step_id, workflow_name, timeout_ms)
