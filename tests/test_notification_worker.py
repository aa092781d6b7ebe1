from __future__ import annotations

import logging

import pytest

from order_workflow.adapters.outbound.logging_email import LoggingEmailSender
from order_workflow.adapters.outbound.queue_notifications import (
    AsyncioNotificationQueue,
    NotificationWorker,
)
from order_workflow.core.domain.model.errors import QueueError
from order_workflow.core.domain.model.notification import NotificationMessage
from tests.fakes import ADMIN, RecordingEmailSender


def message(subject: str) -> NotificationMessage:
    return NotificationMessage(to=ADMIN, subject=subject, body="<p>hi</p>")


@pytest.mark.asyncio
async def test_worker_delivers_in_order():
    queue = AsyncioNotificationQueue()
    sender = RecordingEmailSender()
    worker = NotificationWorker(queue, sender)
    worker.start()

    await queue.enqueue(message("one"))
    await queue.enqueue(message("two"))
    await worker.stop(timeout=1.0)

    assert [m.subject for m in sender.sent] == ["one", "two"]
    assert worker.delivered == 2


@pytest.mark.asyncio
async def test_failed_delivery_is_dropped_and_worker_continues(caplog):
    queue = AsyncioNotificationQueue()
    sender = RecordingEmailSender(fail_subjects={"bad"})
    worker = NotificationWorker(queue, sender)
    worker.start()

    with caplog.at_level(logging.ERROR):
        await queue.enqueue(message("bad"))
        await queue.enqueue(message("good"))
        await worker.stop(timeout=1.0)

    assert [m.subject for m in sender.sent] == ["good"]
    assert (worker.delivered, worker.failed) == (1, 1)
    assert "Failed to deliver notification" in caplog.text


@pytest.mark.asyncio
async def test_stop_delivers_messages_queued_before_start():
    queue = AsyncioNotificationQueue()
    sender = RecordingEmailSender()
    await queue.enqueue(message("early"))

    worker = NotificationWorker(queue, sender)
    worker.start()
    await worker.stop(timeout=1.0)

    assert [m.subject for m in sender.sent] == ["early"]
    assert queue.qsize() == 0


@pytest.mark.asyncio
async def test_closed_queue_rejects_messages():
    queue = AsyncioNotificationQueue()
    queue.close()

    with pytest.raises(QueueError):
        await queue.enqueue(message("late"))
    assert queue.closed


@pytest.mark.asyncio
async def test_stop_without_start_closes_queue():
    queue = AsyncioNotificationQueue()
    worker = NotificationWorker(queue, RecordingEmailSender())

    await worker.stop()

    assert queue.closed


@pytest.mark.asyncio
async def test_logging_sender_writes_to_log(caplog):
    with caplog.at_level(logging.INFO):
        await LoggingEmailSender().send(message("New order #1"))

    assert f"to={ADMIN} subject=New order #1" in caplog.text


@pytest.mark.asyncio
async def test_logging_sender_can_fail():
    with pytest.raises(ConnectionError):
        await LoggingEmailSender(fail=True).send(message("x"))
