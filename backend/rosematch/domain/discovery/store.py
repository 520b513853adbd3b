"""Redis-backed Profile Store and durable swipe ledger."""

from __future__ import annotations

import json
import logging
from typing import Iterable, List, Optional, Set

from rosematch.domain.discovery.exceptions import ConfigurationError
from rosematch.domain.discovery.models import Preferences, Profile
from rosematch.infra.redis import redis_client

log = logging.getLogger(__name__)

PROFILES_DATA_KEY = "profiles:data"
PROFILES_ORDER_KEY = "profiles:order"


def decided_key(viewer_id: str) -> str:
	return f"discovery:decided:{viewer_id}"


def _decode_profile(raw: Optional[str], *, strict: bool = False) -> Optional[Profile]:
	"""Decode a stored profile.

	Broken preferences raise ConfigurationError when ``strict``; otherwise the
	profile is skipped and the reason logged.
	"""
	if not raw:
		return None
	try:
		return Profile.from_record(json.loads(raw))
	except ConfigurationError as exc:
		if strict:
			raise
		log.warning("profile_preferences_invalid", extra={"reason": exc.reason})
		return None
	except (ValueError, KeyError, TypeError):
		log.warning("profile_record_invalid", extra={"raw_length": len(raw)})
		return None


class ProfileStore:
	"""Profiles keyed by id, enumerated in first-insert order.

	Enumeration order matters: the candidate selector keeps it for ties.
	"""

	async def get_all_profiles(self) -> List[Profile]:
		ids = await redis_client.lrange(PROFILES_ORDER_KEY, 0, -1)
		if not ids:
			return []
		raw_rows = await redis_client.hmget(PROFILES_DATA_KEY, ids)
		profiles: List[Profile] = []
		for raw in raw_rows:
			profile = _decode_profile(raw)
			if profile is not None:
				profiles.append(profile)
		return profiles

	async def get_profile(self, profile_id: str) -> Optional[Profile]:
		raw = await redis_client.hget(PROFILES_DATA_KEY, str(profile_id))
		return _decode_profile(raw, strict=True)

	async def upsert_profile(self, profile: Profile) -> Profile:
		payload = json.dumps(profile.to_record(), separators=(",", ":"))
		created = await redis_client.hset(PROFILES_DATA_KEY, profile.id, payload)
		if created:
			await redis_client.rpush(PROFILES_ORDER_KEY, profile.id)
		return profile

	async def get_preferences(self, viewer_id: str) -> Preferences:
		profile = await self.get_profile(viewer_id)
		if profile is None or profile.preferences is None:
			return Preferences()
		return profile.preferences

	async def save_preferences(
		self,
		viewer_id: str,
		prefs: Preferences,
		*,
		purpose: Optional[str] = None,
	) -> Optional[Profile]:
		"""Store ``prefs`` (and optionally a new purpose) on the viewer's profile.

		Works from the raw record so stored preferences that no longer validate
		can still be replaced.
		"""
		raw = await redis_client.hget(PROFILES_DATA_KEY, str(viewer_id))
		if not raw:
			return None
		record = json.loads(raw)
		record["preferences"] = prefs.to_record()
		if purpose is not None:
			record["purpose"] = purpose
		return await self.upsert_profile(Profile.from_record(record))


class RedisLedgerStore:
	"""Durable per-viewer ledger; SADD makes double insertion harmless."""

	async def load_decided(self, viewer_id: str) -> Set[str]:
		members = await redis_client.smembers(decided_key(viewer_id))
		return {str(member) for member in members or ()}

	async def persist_decided(self, viewer_id: str, candidate_ids: Iterable[str]) -> int:
		ids = [str(candidate_id) for candidate_id in candidate_ids]
		if not ids:
			return 0
		return int(await redis_client.sadd(decided_key(viewer_id), *ids))

	async def has_decided(self, viewer_id: str, candidate_id: str) -> bool:
		return bool(await redis_client.sismember(decided_key(viewer_id), str(candidate_id)))
