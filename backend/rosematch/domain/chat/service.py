"""Conversation creation for matched pairs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import List

from .models import MATCH_OPENER, ConversationHandle, ConversationKey
from rosematch.infra.redis import redis_client
from rosematch.obs import metrics as obs_metrics

log = logging.getLogger(__name__)

CONVERSATIONS_KEY = "chat:conversations"


def _user_index_key(user_id: str) -> str:
	return f"chat:conversations:{user_id}"


class ConversationService:
	async def create_or_get_conversation(self, viewer_id: str, candidate_id: str) -> ConversationHandle:
		"""Return the pair's conversation, creating it on first call.

		Idempotent per unordered pair: HSETNX lets exactly one writer win.
		"""
		if str(viewer_id) == str(candidate_id):
			raise ValueError("cannot_converse_with_self")
		key = ConversationKey.from_participants(viewer_id, candidate_id)
		now = datetime.now(timezone.utc)
		fresh = ConversationHandle(
			conversation_id=key.conversation_id,
			user_a=key.user_a,
			user_b=key.user_b,
			last_message=MATCH_OPENER,
			created_at=now,
		)
		payload = json.dumps(fresh.to_record(), separators=(",", ":"))
		created = bool(await redis_client.hsetnx(CONVERSATIONS_KEY, key.conversation_id, payload))
		if created:
			score = now.timestamp()
			for participant in key.participants():
				await redis_client.zadd(_user_index_key(participant), {key.conversation_id: score})
			obs_metrics.inc_conversation("created")
			log.info("conversation_created", extra={"conversation_id": key.conversation_id})
			fresh.created = True
			return fresh
		obs_metrics.inc_conversation("existing")
		raw = await redis_client.hget(CONVERSATIONS_KEY, key.conversation_id)
		return ConversationHandle.from_record(json.loads(raw))

	async def list_conversations(self, user_id: str, *, limit: int = 50) -> List[ConversationHandle]:
		ids = await redis_client.zrevrange(_user_index_key(user_id), 0, max(limit, 1) - 1)
		if not ids:
			return []
		rows = await redis_client.hmget(CONVERSATIONS_KEY, ids)
		return [ConversationHandle.from_record(json.loads(raw)) for raw in rows if raw]
