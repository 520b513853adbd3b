"""Schemas for conversation listings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from .models import ConversationHandle


class ConversationSummary(BaseModel):
	conversation_id: str
	peer_id: str
	last_message: str
	created_at: datetime

	@classmethod
	def from_handle(cls, handle: ConversationHandle, *, viewer_id: str) -> "ConversationSummary":
		return cls(
			conversation_id=handle.conversation_id,
			peer_id=handle.peer_of(viewer_id),
			last_message=handle.last_message,
			created_at=handle.created_at,
		)
