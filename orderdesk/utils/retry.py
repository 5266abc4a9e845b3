"""
Retry with exponential backoff for optimistic locking conflicts
"""
import asyncio
import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from orderdesk.core.config import Config
from orderdesk.repositories.exceptions import ConcurrencyConflict


logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_EXCEPTIONS = (ConcurrencyConflict,)


def retry_on_conflict(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float = 1.0,
    exponential_base: float = 2.0,
    exceptions: tuple = RETRYABLE_EXCEPTIONS,
) -> Callable:
    """
    Decorator re-running a coroutine when a concurrent writer wins the race

    The wrapped coroutine must reload its data on every call. Any other
    exception propagates at once; the conflict itself is re-raised once the
    attempts run out.

    Args:
        max_attempts: Total attempts, Config.CONFLICT_RETRY_ATTEMPTS by default
        base_delay: First delay in seconds, Config.CONFLICT_RETRY_BASE_DELAY by default
        max_delay: Delay cap in seconds
        exponential_base: Growth factor of the delay
        exceptions: Exception types to retry

    Returns:
        Function decorator

    Example:
        @retry_on_conflict(max_attempts=5)
        async def confirm(order_id):
            order = await repo.load_order(order_id)
            order.advance_status(OrderStatus.PENDING)
            return await repo.save_order(order)
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            attempts = max_attempts if max_attempts is not None else Config.CONFLICT_RETRY_ATTEMPTS
            delay_base = base_delay if base_delay is not None else Config.CONFLICT_RETRY_BASE_DELAY
            attempts = max(attempts, 1)

            for attempt in range(1, attempts + 1):
                try:
                    return await func(*args, **kwargs)

                except exceptions as e:
                    if attempt >= attempts:
                        logger.error(
                            "%s: Max attempts reached. Giving up. Last error: %s",
                            func.__name__,
                            str(e),
                        )
                        raise

                    delay = min(delay_base * (exponential_base ** (attempt - 1)), max_delay)
                    logger.warning(
                        "%s: %s occurred. Attempt %d/%d. Error: %s",
                        func.__name__,
                        type(e).__name__,
                        attempt,
                        attempts,
                        str(e),
                    )
                    logger.info("Retrying in %.2f seconds...", delay)
                    await asyncio.sleep(delay)

            raise RuntimeError(f"{func.__name__}: retry loop exited without a result")

        return wrapper

    return decorator
