import pytest

from rosematch.domain.chat.models import MATCH_OPENER, ConversationKey
from rosematch.domain.chat.schemas import ConversationSummary
from rosematch.domain.chat.service import ConversationService


def test_conversation_key_is_order_independent():
    first = ConversationKey.from_participants("zoe", "adam")
    second = ConversationKey.from_participants("adam", "zoe")

    assert first == second
    assert first.conversation_id == "chat:adam:zoe"


@pytest.mark.asyncio
async def test_create_or_get_is_idempotent_per_pair():
    conversations = ConversationService()

    created = await conversations.create_or_get_conversation("viewer", "ava")
    again = await conversations.create_or_get_conversation("ava", "viewer")

    assert created.created is True
    assert again.created is False
    assert again.conversation_id == created.conversation_id
    assert again.last_message == MATCH_OPENER


@pytest.mark.asyncio
async def test_conversation_is_listed_for_both_participants():
    conversations = ConversationService()
    handle = await conversations.create_or_get_conversation("viewer", "ava")
    await conversations.create_or_get_conversation("viewer", "bea")

    mine = await conversations.list_conversations("viewer")
    theirs = await conversations.list_conversations("ava")

    assert {item.conversation_id for item in mine} == {"chat:ava:viewer", "chat:bea:viewer"}
    assert [item.conversation_id for item in theirs] == [handle.conversation_id]
    summary = ConversationSummary.from_handle(theirs[0], viewer_id="ava")
    assert summary.peer_id == "viewer"


@pytest.mark.asyncio
async def test_cannot_open_conversation_with_self():
    with pytest.raises(ValueError):
        await ConversationService().create_or_get_conversation("viewer", "viewer")


@pytest.mark.asyncio
async def test_empty_listing():
    assert await ConversationService().list_conversations("nobody") == []
