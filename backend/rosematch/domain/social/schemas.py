"""Schemas for the notification inbox."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .notifications import Notification


class NotificationItem(BaseModel):
    id: str
    kind: str
    title: str
    body: str
    link: Optional[str] = None
    read_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_model(cls, notification: Notification) -> "NotificationItem":
        return cls(
            id=notification.id,
            kind=notification.kind,
            title=notification.title,
            body=notification.body,
            link=notification.link,
            read_at=notification.read_at,
            created_at=notification.created_at,
        )
