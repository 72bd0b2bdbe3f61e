"""Shared concurrency primitives for the branch fan-out stages.

Two helpers are exposed:

1. **bounded** -- wraps one awaitable in ``asyncio.wait_for`` so every
   external call carries a timeout and a slow branch turns into a captured
   ``asyncio.TimeoutError`` instead of a hang.

2. **isolated_gather** -- the fan-out / fan-in used by branch search and
   branch selection: run every awaitable concurrently, optionally under a
   caller-owned semaphore and a per-item timeout, and return results and
   exceptions side by side in input order.  One failing branch never
   cancels its siblings.

There is no module-level semaphore; callers that want
throttling construct one at startup and pass it in.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

_T = TypeVar("_T")


async def bounded(awaitable: Awaitable[_T], timeout: float | None) -> _T:
    """Await *awaitable*, raising ``asyncio.TimeoutError`` after *timeout* seconds.

    A ``None`` timeout awaits without a bound.
    """
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout=timeout)


async def isolated_gather(
    coros: list[Awaitable[_T]],
    timeout: float | None = None,
    semaphore: asyncio.Semaphore | None = None,
) -> list[_T | BaseException]:
    """Run awaitables concurrently and capture each failure as a value.

    Parameters
    ----------
    coros:
        Awaitable objects to execute concurrently.
    timeout:
        Optional per-awaitable timeout in seconds.  The clock starts once
        the semaphore slot (if any) has been acquired.
    semaphore:
        Optional semaphore bounding how many awaitables run at once.

    Returns
    -------
    list[_T | BaseException]
        Results in the same order as the input awaitables; a failed or
        timed-out awaitable contributes its exception instead.
    """

    async def _wrapped(coro: Awaitable[_T]) -> _T:
        if semaphore is None:
            return await bounded(coro, timeout)
        async with semaphore:
            return await bounded(coro, timeout)

    return await asyncio.gather(*(_wrapped(c) for c in coros), return_exceptions=True)
