import asyncio

import pytest

from ladder.cache import TTLCache


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_concurrent_callers_share_one_load() -> None:
    cache: TTLCache[str, int] = TTLCache("test")
    calls = []

    async def loader() -> int:
        calls.append(1)
        await asyncio.sleep(0.01)
        return 42

    async def run():
        return await asyncio.gather(*(cache.get_or_fetch("k", 60, loader) for _ in range(5)))

    assert asyncio.run(run()) == [42] * 5
    assert len(calls) == 1


def test_entries_expire_after_ttl() -> None:
    clock = _Clock()
    cache: TTLCache[str, int] = TTLCache("test", clock=clock)
    calls = []

    async def loader() -> int:
        calls.append(1)
        return len(calls)

    assert asyncio.run(cache.get_or_fetch("k", 10, loader)) == 1
    clock.now = 9.9
    assert asyncio.run(cache.get_or_fetch("k", 10, loader)) == 1
    clock.now = 10.0
    assert asyncio.run(cache.get_or_fetch("k", 10, loader)) == 2
    assert cache.peek("k") == 2


def test_failed_loads_are_not_cached() -> None:
    cache: TTLCache[str, str] = TTLCache("test")
    attempts = []

    async def flaky() -> str:
        attempts.append(1)
        if len(attempts) == 1:
            raise RuntimeError("upstream down")
        return "ok"

    with pytest.raises(RuntimeError):
        asyncio.run(cache.get_or_fetch("k", 60, flaky))
    assert len(cache) == 0
    assert asyncio.run(cache.get_or_fetch("k", 60, flaky)) == "ok"


def test_none_is_cached() -> None:
    cache: TTLCache[str, None] = TTLCache("test")
    calls = []

    async def loader() -> None:
        calls.append(1)
        return None

    asyncio.run(cache.get_or_fetch("k", 60, loader))
    asyncio.run(cache.get_or_fetch("k", 60, loader))
    assert len(calls) == 1
