"""
Tests for the response cache and its in-flight registry.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from .cache import ResponseCacheImpl
from .models import InferenceResult, ModelId


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _result(text: str = "[]") -> InferenceResult:
    return InferenceResult(
        text=text,
        model_used=ModelId.GPT_4O_MINI,
        tokens_consumed=100,
        latency_ms=12.0,
        cost_usd=Decimal("0.00004"),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ResponseCacheImpl:
    return ResponseCacheImpl(max_size=3, default_ttl=60.0, clock=clock)


# --- get / put ---


async def test_get_miss(cache: ResponseCacheImpl) -> None:
    assert await cache.get("missing") is None
    assert cache.stats()["misses"] == 1


async def test_put_then_get(cache: ResponseCacheImpl) -> None:
    result = _result("hello")
    await cache.put("fp", result)
    assert await cache.get("fp") == result
    assert cache.stats()["hits"] == 1


async def test_put_overwrites(cache: ResponseCacheImpl) -> None:
    await cache.put("fp", _result("old"))
    await cache.put("fp", _result("new"))
    cached = await cache.get("fp")
    assert cached is not None and cached.text == "new"
    assert len(cache) == 1


async def test_hit_just_before_ttl(cache: ResponseCacheImpl, clock: FakeClock) -> None:
    await cache.put("fp", _result(), ttl=30.0)
    clock.advance(30.0 - 0.001)
    assert await cache.get("fp") is not None


async def test_miss_just_after_ttl(cache: ResponseCacheImpl, clock: FakeClock) -> None:
    await cache.put("fp", _result(), ttl=30.0)
    clock.advance(30.0 + 0.001)
    assert await cache.get("fp") is None
    # Expired entries are evicted on access
    assert len(cache) == 0


async def test_default_ttl_applies(cache: ResponseCacheImpl, clock: FakeClock) -> None:
    await cache.put("fp", _result())
    clock.advance(61.0)
    assert await cache.get("fp") is None


# --- LRU eviction ---


async def test_evicts_least_recently_used(cache: ResponseCacheImpl) -> None:
    for key in ("a", "b", "c"):
        await cache.put(key, _result(key))

    # Touch "a" so "b" becomes the oldest
    await cache.get("a")
    await cache.put("d", _result("d"))

    assert await cache.get("b") is None
    assert await cache.get("a") is not None
    assert await cache.get("c") is not None
    assert await cache.get("d") is not None
    assert cache.stats()["evictions"] == 1


async def test_size_never_exceeds_max(cache: ResponseCacheImpl) -> None:
    for i in range(20):
        await cache.put(f"fp-{i}", _result())
    assert len(cache) == 3


def test_max_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ResponseCacheImpl(max_size=0)


# --- invalidate / clear ---


async def test_invalidate_pattern(cache: ResponseCacheImpl) -> None:
    await cache.put("abc1", _result())
    await cache.put("abc2", _result())
    await cache.put("xyz", _result())

    assert await cache.invalidate("^abc") == 2
    assert await cache.get("xyz") is not None


async def test_clear(cache: ResponseCacheImpl) -> None:
    await cache.put("a", _result())
    await cache.clear()
    assert len(cache) == 0


# --- in-flight registry ---


async def test_begin_in_flight_claims_once(cache: ResponseCacheImpl) -> None:
    assert await cache.begin_in_flight("fp") is False
    assert await cache.begin_in_flight("fp") is True
    assert cache.is_in_flight("fp")

    cache.end_in_flight("fp")
    assert not cache.is_in_flight("fp")
    assert await cache.begin_in_flight("fp") is False


async def test_end_without_claim_is_harmless(cache: ResponseCacheImpl) -> None:
    cache.end_in_flight("never-claimed")
    assert cache.stats()["in_flight"] == 0


async def test_await_in_flight_returns_result(cache: ResponseCacheImpl) -> None:
    await cache.begin_in_flight("fp")

    async def owner() -> None:
        await asyncio.sleep(0.01)
        await cache.put("fp", _result("done"))
        cache.end_in_flight("fp")

    task = asyncio.create_task(owner())
    result = await cache.await_in_flight("fp", timeout=1.0)
    await task

    assert result is not None and result.text == "done"


async def test_await_in_flight_owner_failed(cache: ResponseCacheImpl) -> None:
    await cache.begin_in_flight("fp")

    async def owner() -> None:
        await asyncio.sleep(0.01)
        cache.end_in_flight("fp")

    task = asyncio.create_task(owner())
    assert await cache.await_in_flight("fp", timeout=1.0) is None
    await task


async def test_await_in_flight_times_out(cache: ResponseCacheImpl) -> None:
    await cache.begin_in_flight("fp")
    assert await cache.await_in_flight("fp", timeout=0.01) is None
    # The waiter never tears down someone else's claim
    assert cache.is_in_flight("fp")


async def test_await_in_flight_without_claim_checks_cache(cache: ResponseCacheImpl) -> None:
    await cache.put("fp", _result("ready"))
    result = await cache.await_in_flight("fp", timeout=0.01)
    assert result is not None and result.text == "ready"


# --- scoped claim ---


async def test_claim_releases_on_error(cache: ResponseCacheImpl) -> None:
    with pytest.raises(RuntimeError):
        async with cache.claim("fp") as owner:
            assert owner is True
            raise RuntimeError("boom")
    assert not cache.is_in_flight("fp")


async def test_claim_non_owner_leaves_marker(cache: ResponseCacheImpl) -> None:
    async with cache.claim("fp") as first:
        async with cache.claim("fp") as second:
            assert first is True
            assert second is False
        assert cache.is_in_flight("fp")
    assert not cache.is_in_flight("fp")


async def test_claim_releases_on_cancellation(cache: ResponseCacheImpl) -> None:
    started = asyncio.Event()

    async def holder() -> None:
        async with cache.claim("fp"):
            started.set()
            await asyncio.sleep(10)

    task = asyncio.create_task(holder())
    await started.wait()
    assert cache.is_in_flight("fp")

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert not cache.is_in_flight("fp")


async def test_concurrent_claims_single_owner(cache: ResponseCacheImpl) -> None:
    results = await asyncio.gather(*(cache.begin_in_flight("fp") for _ in range(50)))
    assert results.count(False) == 1
