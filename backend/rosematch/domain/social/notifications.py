"""Domain logic for user notifications."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import ulid

from rosematch.infra.redis import redis_client
from rosematch.obs import metrics as obs_metrics
from rosematch.settings import settings

KIND_MATCH = "MATCH"


def _inbox_key(user_id: str) -> str:
    return f"notifications:{user_id}"


@dataclass
class Notification:
    id: str
    user_id: str
    title: str
    body: str
    kind: str  # e.g. "MATCH", "MESSAGE", "EVENT"
    link: Optional[str]
    read_at: Optional[datetime]
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "body": self.body,
            "kind": self.kind,
            "link": self.link,
            "read_at": self.read_at.isoformat() if self.read_at else None,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        read_at = data.get("read_at")
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            title=str(data["title"]),
            body=str(data["body"]),
            kind=str(data["kind"]),
            link=data.get("link"),
            read_at=datetime.fromisoformat(read_at) if read_at else None,
            created_at=datetime.fromisoformat(data["created_at"]),
        )


class NotificationRepository:
    """Capped per-user inbox stored as a Redis list, newest first."""

    async def create(
        self,
        *,
        user_id: str,
        title: str,
        body: str,
        kind: str,
        link: Optional[str] = None,
    ) -> Notification:
        notification = Notification(
            id=str(ulid.new()),
            user_id=str(user_id),
            title=title,
            body=body,
            kind=kind,
            link=link,
            read_at=None,
            created_at=datetime.now(timezone.utc),
        )
        key = _inbox_key(notification.user_id)
        async with redis_client.pipeline(transaction=True) as pipe:
            pipe.lpush(key, json.dumps(notification.to_dict(), separators=(",", ":")))
            pipe.ltrim(key, 0, max(settings.notifications_max_items, 1) - 1)
            await pipe.execute()
        obs_metrics.inc_notification(kind)
        return notification

    async def list_for_user(self, user_id: str, *, limit: int = 50) -> List[Notification]:
        rows = await redis_client.lrange(_inbox_key(str(user_id)), 0, max(limit, 1) - 1)
        return [Notification.from_dict(json.loads(row)) for row in rows or ()]


_repository = NotificationRepository()


async def notify(
    user_id: str,
    *,
    kind: str,
    title: str,
    body: str,
    link: Optional[str] = None,
) -> Notification:
    return await _repository.create(user_id=user_id, title=title, body=body, kind=kind, link=link)


async def notify_match(user_id: str, *, peer_name: str, conversation_id: Optional[str] = None) -> Notification:
    return await notify(
        user_id,
        kind=KIND_MATCH,
        title="New Match!",
        body=f"You matched with {peer_name}",
        link=f"/chats/{conversation_id}" if conversation_id else None,
    )


async def list_notifications(user_id: str, *, limit: int = 50) -> List[Notification]:
    return await _repository.list_for_user(user_id, limit=limit)
