# ===== IMPORTS & DEPENDENCIES =====
import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

# ===== CONFIGURATION & CONSTANTS =====
logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY = 1.0
DEFAULT_TIMEOUT = 15.0


# ===== CORE BUSINESS LOGIC =====
def backoff_delay(attempt: int, delay: float) -> float:
    """Delay to wait after failed attempt number `attempt` (1-based): delay * 2^(attempt-1)."""
    return delay * (2 ** (attempt - 1))


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = DEFAULT_DELAY,
    timeout: float = DEFAULT_TIMEOUT,
    on_retry: Optional[Callable[[int, BaseException], None]] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Runs `operation` up to `max_attempts` times, racing every attempt against `timeout`.

    After a failed attempt (exception or timeout) that is not the last one, `on_retry`
    is called with the attempt number and the error, then the controller waits
    `delay * 2^(attempt-1)` seconds. When all attempts fail the error of the final
    attempt is re-raised. The wrapped operation is opaque: the same controller
    drives page fetches and webhook deliveries.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    last_error: Optional[BaseException] = None
    for attempt in range(1, max_attempts + 1):
        try:
            return await asyncio.wait_for(operation(), timeout=timeout)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if isinstance(e, asyncio.TimeoutError):
                e = asyncio.TimeoutError(f"Request timeout after {timeout}s")
            last_error = e
            logger.warning(f"⚠️ [retry] Attempt {attempt}/{max_attempts} failed: {type(e).__name__}: {e}")

            if attempt < max_attempts:
                wait = backoff_delay(attempt, delay)
                if on_retry:
                    on_retry(attempt, e)
                logger.info(f"Retrying in {wait:.2f} seconds...")
                await sleep(wait)

    logger.error(f"❌ [retry] Giving up after {max_attempts} attempts.")
    raise last_error
