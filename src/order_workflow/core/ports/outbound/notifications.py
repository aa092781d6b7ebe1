from __future__ import annotations

from typing import Protocol

from order_workflow.core.domain.model.notification import NotificationMessage


class NotificationQueue(Protocol):
    async def enqueue(self, message: NotificationMessage) -> None:
        """Hand a message to the delivery worker. Raises QueueError when refused."""
        ...


class EmailSender(Protocol):
    async def send(self, message: NotificationMessage) -> None: ...
