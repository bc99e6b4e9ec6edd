import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

from .logging_config import get_logger

T = TypeVar("T")

DEFAULT_DELAYS: Sequence[float] = (1.0, 3.0, 5.0)

logger = get_logger("retrier")


async def do_with_retries(
    fn: Callable[[], Awaitable[T]],
    delays: Sequence[float] = DEFAULT_DELAYS,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
) -> T:
    """Call ``fn`` until it succeeds, sleeping ``delays[i]`` after attempt i fails.

    The number of attempts is ``len(delays)``; the last error is re-raised.
    """
    if not delays:
        return await fn()

    last_error: BaseException | None = None
    for attempt, delay in enumerate(delays, start=1):
        try:
            return await fn()
        except retry_on as e:
            last_error = e
            logger.warning(
                "attempt failed",
                extra={"attempt": attempt, "max_attempts": len(delays), "error": str(e)},
            )
            if attempt < len(delays):
                await asyncio.sleep(delay)
    assert last_error is not None
    raise last_error
