"""
First-to-settle race over awaitables.
"""

import asyncio
from typing import Any, Awaitable


async def race(*aws: Awaitable[Any]) -> Any:
    """
    Run awaitables concurrently and settle with the first one that finishes.

    The winner's result is returned, or its exception re-raised. Every other
    branch is cancelled and awaited before returning. Branches that settle in
    the same loop iteration are ranked by argument order.

    Args:
        *aws: Coroutines or futures to race

    Returns:
        Result of the first branch to settle
    """
    if not aws:
        raise ValueError("race() needs at least one awaitable")

    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        # Drain losers so cancellations complete and their exceptions are retrieved.
        await asyncio.gather(*tasks, return_exceptions=True)

    winner = next(task for task in tasks if task in done)
    return winner.result()
