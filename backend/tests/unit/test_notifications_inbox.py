import pytest

from rosematch.domain.social import notifications
from rosematch.settings import settings


@pytest.mark.asyncio
async def test_notify_match_stores_inbox_entry():
    created = await notifications.notify_match("viewer", peer_name="Ava", conversation_id="chat:ava:viewer")

    inbox = await notifications.list_notifications("viewer")

    assert [item.id for item in inbox] == [created.id]
    assert inbox[0].title == "New Match!"
    assert inbox[0].body == "You matched with Ava"
    assert inbox[0].kind == notifications.KIND_MATCH
    assert inbox[0].link == "/chats/chat:ava:viewer"
    assert inbox[0].read_at is None


@pytest.mark.asyncio
async def test_match_without_conversation_has_no_link():
    await notifications.notify_match("viewer", peer_name="Bea")

    inbox = await notifications.list_notifications("viewer")

    assert inbox[0].link is None


@pytest.mark.asyncio
async def test_inbox_is_newest_first_and_capped(monkeypatch):
    monkeypatch.setattr(settings, "notifications_max_items", 3)

    for name in ("a", "b", "c", "d", "e"):
        await notifications.notify_match("viewer", peer_name=name)

    inbox = await notifications.list_notifications("viewer")

    assert [item.body for item in inbox] == ["You matched with e", "You matched with d", "You matched with c"]
