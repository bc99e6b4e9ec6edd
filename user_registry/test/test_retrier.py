from unittest.mock import AsyncMock

import pytest

from user_registry.infra.retrier import do_with_retries


@pytest.mark.asyncio
async def test_returns_first_success():
    fn = AsyncMock(side_effect=[ConnectionError("refused"), "ok"])

    assert await do_with_retries(fn, delays=(0, 0, 0)) == "ok"
    assert fn.await_count == 2


@pytest.mark.asyncio
async def test_reraises_last_error_after_all_attempts():
    fn = AsyncMock(side_effect=[OSError("1"), OSError("2"), OSError("3")])

    with pytest.raises(OSError, match="3"):
        await do_with_retries(fn, delays=(0, 0, 0))
    assert fn.await_count == 3


@pytest.mark.asyncio
async def test_does_not_retry_unlisted_errors():
    fn = AsyncMock(side_effect=ValueError("bad config"))

    with pytest.raises(ValueError):
        await do_with_retries(fn, delays=(0, 0), retry_on=(OSError,))
    assert fn.await_count == 1
