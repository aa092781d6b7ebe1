from __future__ import annotations

import logging
from dataclasses import dataclass

from order_workflow.core.domain.model.notification import NotificationMessage
from order_workflow.core.ports.outbound.notifications import EmailSender

logger = logging.getLogger(__name__)


@dataclass
class LoggingEmailSender(EmailSender):
    """Writes outgoing e-mail to the log instead of an SMTP server."""

    fail: bool = False

    async def send(self, message: NotificationMessage) -> None:
        if self.fail:
            raise ConnectionError("mail server is down")
        logger.info("[email] to=%s subject=%s", message.to, message.subject)
