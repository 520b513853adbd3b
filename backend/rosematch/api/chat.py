"""Conversation listing and notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from rosematch.domain.chat.schemas import ConversationSummary
from rosematch.domain.chat.service import ConversationService
from rosematch.domain.social import notifications
from rosematch.domain.social.schemas import NotificationItem
from rosematch.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["chat"])

_conversations = ConversationService()


@router.get("/chats", response_model=list[ConversationSummary])
async def list_my_conversations(
	limit: int = Query(default=50, ge=1, le=200),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> list[ConversationSummary]:
	handles = await _conversations.list_conversations(auth_user.id, limit=limit)
	return [ConversationSummary.from_handle(handle, viewer_id=auth_user.id) for handle in handles]


@router.get("/notifications", response_model=list[NotificationItem])
async def list_my_notifications(
	limit: int = Query(default=50, ge=1, le=200),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> list[NotificationItem]:
	items = await notifications.list_notifications(auth_user.id, limit=limit)
	return [NotificationItem.from_model(item) for item in items]
