# site_crawler/crawler/work_queue.py
"""
Bounded work queue with fire-and-forget dispatch.
"""
from __future__ import annotations

import asyncio
from typing import Set

from site_crawler.crawler.models import Address


class WorkQueue:
    """
    Bounded FIFO of pending addresses shared by all workers of a run.

    Every item is *outstanding* from the moment it is handed to :meth:`put` or
    :meth:`dispatch` until a worker calls :meth:`task_done` for it, so
    :meth:`join` returns only when nothing is queued, nothing is waiting to be
    sent and no worker is still processing.
    """

    def __init__(self, maxsize: int = 2) -> None:
        self._queue: asyncio.Queue[Address] = asyncio.Queue(maxsize)
        self._senders: Set[asyncio.Task] = set()
        self._outstanding = 0
        self._drained = asyncio.Event()
        self._drained.set()

    @property
    def maxsize(self) -> int:
        return self._queue.maxsize

    @property
    def pending_sends(self) -> int:
        """Number of dispatches still waiting for room in the queue."""
        return len(self._senders)

    def qsize(self) -> int:
        return self._queue.qsize()

    def _track(self) -> None:
        self._outstanding += 1
        self._drained.clear()

    async def put(self, address: Address) -> None:
        """Enqueue ``address``, suspending the caller while the queue is full."""
        self._track()
        await self._queue.put(address)

    def dispatch(self, address: Address) -> asyncio.Task:
        """Send ``address`` from its own task so the caller never blocks on a full queue."""
        self._track()
        task = asyncio.create_task(self._queue.put(address))
        self._senders.add(task)
        task.add_done_callback(self._senders.discard)
        return task

    async def get(self) -> Address:
        return await self._queue.get()

    def task_done(self) -> None:
        """Mark one dequeued address as fully processed."""
        self._queue.task_done()
        self._outstanding -= 1
        if self._outstanding <= 0:
            self._outstanding = 0
            self._drained.set()

    async def join(self) -> None:
        await self._drained.wait()

    async def close(self) -> None:
        """Abandon every pending dispatch."""
        senders = list(self._senders)
        for task in senders:
            task.cancel()
        await asyncio.gather(*senders, return_exceptions=True)


__all__ = ["WorkQueue"]
