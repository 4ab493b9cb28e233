# File: app/core/concurrency.py

import asyncio
import logging
from typing import Awaitable, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def gather_or_cancel(*aws: Awaitable[T]) -> List[T]:
    """
    Fan-out / fan-in.
    Runs every awaitable concurrently and returns results in submission order.

    On the first failure (or if the caller is cancelled) every sibling still
    running is cancelled AND awaited before the exception propagates, so nothing
    keeps writing to disk after the caller starts cleaning up.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.debug(f"Cancelling {len(pending)} sibling task(s) after failure")
        # Also collects exceptions from siblings that failed on their own
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
