"""Tests for the first-to-settle race."""

import asyncio

import pytest

from feed_engine.race import race


async def _after(delay: float, value):
    await asyncio.sleep(delay)
    return value


async def _fail_after(delay: float, exc: Exception):
    await asyncio.sleep(delay)
    raise exc


def test_fastest_result_wins():
    """Test that the first branch to finish provides the result."""
    assert asyncio.run(race(_after(0.5, "slow"), _after(0, "fast"))) == "fast"


def test_fastest_exception_wins():
    """Test that an exception settling first is re-raised."""
    with pytest.raises(KeyError):
        asyncio.run(race(_after(0.5, "slow"), _fail_after(0, KeyError("boom"))))


def test_loser_is_cancelled():
    """Test that the losing branch is cancelled before race returns."""
    cancelled = []

    async def loser():
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise

    async def run():
        result = await race(_after(0, "winner"), loser())
        return result, list(cancelled)

    assert asyncio.run(run()) == ("winner", [True])


def test_simultaneous_settlement_prefers_argument_order():
    """Test that branches done in the same iteration are ranked by position."""
    assert asyncio.run(race(_after(0, "first"), _after(0, "second"))) == "first"


def test_cancelling_the_race_cancels_every_branch():
    """Test that cancelling the caller cancels all branches."""
    cancelled = []

    async def branch(name):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(name)
            raise

    async def run():
        task = asyncio.create_task(race(branch("a"), branch("b")))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())
    assert sorted(cancelled) == ["a", "b"]


def test_race_needs_a_branch():
    """Test that an empty race is rejected."""
    with pytest.raises(ValueError):
        asyncio.run(race())
