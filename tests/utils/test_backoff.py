from __future__ import annotations

import pytest

from company_intel.utils.backoff import exponential_backoff, retry_async


def test_exponential_backoff_without_jitter_doubles_until_cap():
    delays = [delay for _, delay in exponential_backoff(max_attempts=5, base_delay=1, max_delay=5, jitter=0)]

    assert delays == [1, 2, 4, 5, 5]


def test_exponential_backoff_validates_arguments():
    with pytest.raises(ValueError):
        list(exponential_backoff(max_attempts=0))
    with pytest.raises(ValueError):
        list(exponential_backoff(factor=0.5))


@pytest.mark.asyncio
async def test_retry_async_retries_until_success():
    calls = {"count": 0}
    sleeps: list[float] = []

    async def flaky() -> str:
        calls["count"] += 1
        if calls["count"] < 3:
            raise ConnectionError("down")
        return "ok"

    async def fake_sleep(delay: float) -> None:
        sleeps.append(delay)

    result = await retry_async(flaky, attempts=3, retry_on=(ConnectionError,), sleep=fake_sleep)

    assert result == "ok"
    assert calls["count"] == 3
    assert len(sleeps) == 2


@pytest.mark.asyncio
async def test_retry_async_reraises_after_budget_and_ignores_other_errors():
    async def always_down() -> None:
        raise ConnectionError("down")

    async def broken() -> None:
        raise KeyError("bug")

    async def fake_sleep(delay: float) -> None:
        return None

    with pytest.raises(ConnectionError):
        await retry_async(always_down, attempts=2, retry_on=(ConnectionError,), sleep=fake_sleep)
    with pytest.raises(KeyError):
        await retry_async(broken, attempts=5, retry_on=(ConnectionError,), sleep=fake_sleep)
