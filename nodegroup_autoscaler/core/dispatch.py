#!/usr/bin/env python3
"""
Per-key serialization of asynchronous jobs
"""

import asyncio
import logging
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, List, Tuple

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


class KeyedDispatcher:
    """
    Runs jobs one at a time per key, in submission order

    Each key with pending work gets its own FIFO queue and a single worker
    task draining it, so jobs for the same key never overlap while jobs for
    different keys run independently. A worker exits as soon as its queue is
    empty; idle keys hold no tasks.
    """

    def __init__(self):
        self._queues: Dict[str, Deque[Tuple[Job, asyncio.Future]]] = {}
        self._workers: Dict[str, asyncio.Task] = {}

    async def submit(self, key: str, job: Job) -> Any:
        """
        Queue a job for a key and wait for its result

        Args:
            key: Serialization key (NodeGroup name)
            job: Zero-argument coroutine function

        Returns:
            Whatever the job returns; exceptions raised by the job propagate
        """
        future = asyncio.get_running_loop().create_future()
        queue = self._queues.get(key)
        if queue is None:
            queue = deque()
            self._queues[key] = queue
            self._workers[key] = asyncio.create_task(self._drain(key, queue), name=f"dispatch-{key}")
        queue.append((job, future))
        return await future

    async def _drain(self, key: str, queue: Deque[Tuple[Job, asyncio.Future]]):
        future = None
        try:
            while queue:
                job, future = queue.popleft()
                if future.cancelled():
                    continue
                try:
                    result = await job()
                except Exception as e:
                    if not future.cancelled():
                        future.set_exception(e)
                else:
                    if not future.cancelled():
                        future.set_result(result)
        finally:
            # No await between the empty check above and this point, so a
            # concurrent submit cannot slip an item into a queue being retired.
            if future is not None and not future.done():
                future.cancel()
            while queue:
                _, future = queue.popleft()
                future.cancel()
            if self._queues.get(key) is queue:
                del self._queues[key]
                del self._workers[key]

    def active_keys(self) -> List[str]:
        return sorted(self._workers)

    def pending(self, key: str) -> int:
        return len(self._queues.get(key, ()))

    async def close(self):
        """Cancel all workers and their queued jobs"""
        workers = list(self._workers.values())
        for task in workers:
            task.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)
        logger.info(f"Dispatcher closed ({len(workers)} workers cancelled)")
