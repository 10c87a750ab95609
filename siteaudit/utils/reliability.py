"""
Reliability patterns for siteaudit.

Provides retry logic for provider calls, rate-limited batch execution and
performance tracking.
"""

import asyncio
import inspect
import logging
import time
from functools import wraps
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

import structlog
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def with_retry(
    max_attempts: int = 3,
    backoff_max: float = 10.0,
    retry_exceptions: tuple = (Exception,),
):
    """Decorator to add retry logic with exponential backoff to sync or async callables."""

    def decorator(func: Callable) -> Callable:
        policy = retry(
            stop=stop_after_attempt(max_attempts),
            wait=wait_exponential(multiplier=1, min=0.5, max=backoff_max),
            retry=retry_if_exception_type(retry_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

        if inspect.iscoroutinefunction(func):

            @policy
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                try:
                    return await func(*args, **kwargs)
                except retry_exceptions as e:
                    logger.warning(
                        "Retrying operation",
                        function=func.__name__,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    raise

            return async_wrapper

        @policy
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except retry_exceptions as e:
                logger.warning(
                    "Retrying operation",
                    function=func.__name__,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

        return wrapper

    return decorator


async def run_in_batches(
    items: Sequence[T],
    func: Callable[[T], Awaitable[R]],
    batch_size: int = 3,
    delay: float = 0.3,
) -> List[Optional[R]]:
    """
    Await ``func`` for every item, a small batch at a time.

    A failing item yields None in its slot; the rest of the batch and the
    following batches still run. Results line up with ``items``.

    Args:
        items: Inputs to process
        func: Async function applied to each item
        batch_size: Concurrent calls per batch
        delay: Seconds to wait between batches

    Returns:
        Results in input order, None where the call failed
    """
    results: List[Optional[R]] = []
    batch_size = max(1, batch_size)

    for start in range(0, len(items), batch_size):
        batch = items[start : start + batch_size]
        outcomes = await asyncio.gather(*(func(item) for item in batch), return_exceptions=True)

        for offset, outcome in enumerate(outcomes):
            if isinstance(outcome, Exception):
                logger.warning(
                    "Batch item failed",
                    item=str(batch[offset])[:100],
                    error=str(outcome),
                    error_type=type(outcome).__name__,
                )
                results.append(None)
            else:
                results.append(outcome)

        if delay and start + batch_size < len(items):
            await asyncio.sleep(delay)

    return results


def track_performance(operation_name: str):
    """
    Decorator to track performance metrics for operations.

    Args:
        operation_name: Name of the operation for logging
    """

    def _log_done(start_time: float, status: str, error: Optional[Exception] = None) -> None:
        fields: dict = {
            "operation": operation_name,
            "duration_seconds": round(time.time() - start_time, 3),
            "status": status,
        }
        if error is not None:
            logger.error("Performance tracking failed", error=str(error), **fields)
        else:
            logger.info("Performance tracking completed", **fields)

    def decorator(func: Callable) -> Callable:
        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs) -> Any:
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _log_done(start_time, "failed", e)
                    raise
                _log_done(start_time, "success")
                return result

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _log_done(start_time, "failed", e)
                raise
            _log_done(start_time, "success")
            return result

        return wrapper

    return decorator
