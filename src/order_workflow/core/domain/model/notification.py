from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationMessage:
    to: str
    subject: str
    body: str
    is_html: bool = True
