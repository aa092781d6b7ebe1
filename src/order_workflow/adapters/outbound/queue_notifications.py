"""
In-process notification queue and the worker that drains it.

The queue is unbounded; producers never wait for delivery. A single
NotificationWorker task reads messages and hands them to an EmailSender. A
message whose delivery fails is logged and dropped; the worker keeps going.
"""

from __future__ import annotations

import asyncio
import logging

from order_workflow.core.domain.model.errors import QueueError
from order_workflow.core.domain.model.notification import NotificationMessage
from order_workflow.core.ports.outbound.notifications import EmailSender, NotificationQueue

logger = logging.getLogger(__name__)


class AsyncioNotificationQueue(NotificationQueue):
    def __init__(self) -> None:
        self._queue: asyncio.Queue[NotificationMessage] = asyncio.Queue()
        self._closed = False

    async def enqueue(self, message: NotificationMessage) -> None:
        if self._closed:
            raise QueueError("notification queue is closed")
        self._queue.put_nowait(message)

    async def get(self) -> NotificationMessage:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        await self._queue.join()

    def close(self) -> None:
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        return self._queue.qsize()

    def drain_nowait(self) -> list[NotificationMessage]:
        """Take every queued message without delivering it."""
        messages = []
        while not self._queue.empty():
            messages.append(self._queue.get_nowait())
            self._queue.task_done()
        return messages


class NotificationWorker:
    def __init__(self, queue: AsyncioNotificationQueue, sender: EmailSender) -> None:
        self._queue = queue
        self._sender = sender
        self._task: asyncio.Task[None] | None = None
        self.delivered = 0
        self.failed = 0

    def start(self) -> None:
        if self._task is not None and not self._task.done():
            return
        logger.info("Notification worker started")
        self._task = asyncio.create_task(self._run(), name="notification-worker")

    async def _run(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._sender.send(message)
                self.delivered += 1
            except Exception:
                self.failed += 1
                logger.error(
                    "Failed to deliver notification to %s: %s",
                    message.to,
                    message.subject,
                    exc_info=True,
                )
            finally:
                self._queue.task_done()

    async def stop(self, timeout: float | None = None) -> None:
        """Close the queue, deliver what is already queued, then stop."""
        self._queue.close()
        if self._task is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Notification worker stopped with %d undelivered message(s)",
                self._queue.qsize(),
            )
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Notification worker stopped")
