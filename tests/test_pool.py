"""Tests for the bounded-concurrency runner."""

import asyncio

import pytest

from tree_ancestors.engine import map_limit


def test_results_in_input_order():
    async def double(x):
        await asyncio.sleep(0.001 * (5 - x))
        return x * 2

    assert asyncio.run(map_limit([1, 2, 3, 4], 2, double)) == [2, 4, 6, 8]


def test_empty_input():
    async def never(x):
        raise AssertionError("not called")

    assert asyncio.run(map_limit([], 3, never)) == []


def test_limit_bounds_in_flight_calls():
    in_flight = 0
    peak = 0

    async def work(x):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        return x

    asyncio.run(map_limit(range(20), 3, work))
    assert peak == 3


def test_invalid_limit():
    async def work(x):
        return x

    with pytest.raises(ValueError):
        asyncio.run(map_limit([1], 0, work))


class TestFailures:
    def test_stop_on_error_skips_remaining(self):
        started = []

        async def work(x):
            started.append(x)
            await asyncio.sleep(0)
            if x == 1:
                raise RuntimeError("boom")
            return x

        with pytest.raises(RuntimeError, match="boom"):
            asyncio.run(map_limit([0, 1, 2, 3], 1, work))
        assert started == [0, 1]

    def test_best_effort_attempts_everything(self):
        started = []

        async def work(x):
            started.append(x)
            if x in (1, 2):
                raise RuntimeError(f"boom {x}")
            return x

        with pytest.raises(RuntimeError, match="boom 1"):
            asyncio.run(map_limit([0, 1, 2, 3], 1, work, stop_on_error=False))
        assert started == [0, 1, 2, 3]
