import pytest

from hackmate.domain.common.errors import ErrorKind
from hackmate.infra.rate_limit import RateLimitExceeded, allow, enforce


@pytest.mark.asyncio
async def test_rate_limit_allows_within_budget():
    assert await allow("invite", "u5", limit=2, window_seconds=60)
    assert await allow("invite", "u5", limit=2, window_seconds=60)


@pytest.mark.asyncio
async def test_rate_limit_blocks_when_budget_exhausted():
    await allow("message", "u6", limit=1, window_seconds=60)
    assert not await allow("message", "u6", limit=1, window_seconds=60)


@pytest.mark.asyncio
async def test_budgets_are_per_actor_and_per_window():
    assert await allow("invite", "u7", limit=1, window_seconds=60, now=120.0)
    assert await allow("invite", "u8", limit=1, window_seconds=60, now=120.0)
    assert not await allow("invite", "u7", limit=1, window_seconds=60, now=150.0)
    assert await allow("invite", "u7", limit=1, window_seconds=60, now=185.0)


@pytest.mark.asyncio
async def test_zero_limit_never_allows():
    assert not await allow("invite", "u9", limit=0)


@pytest.mark.asyncio
async def test_enforce_raises_with_retry_after():
    rules = [("minute", 1, 60), ("day", 100, 86400)]
    await enforce("invite", "u10", rules)
    with pytest.raises(RateLimitExceeded) as excinfo:
        await enforce("invite", "u10", rules)
    assert excinfo.value.kind is ErrorKind.TOO_MANY_REQUESTS
    assert excinfo.value.reason == "rate_limited"
    assert excinfo.value.retry_after == 60
