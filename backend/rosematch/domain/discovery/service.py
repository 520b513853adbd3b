"""Discovery orchestration: sessions, durable ledger writes and match side effects.

The decision session itself is synchronous. This module wraps it for the async
API: it materialises profiles, preferences and the ledger from Redis before a
session opens, serialises calls per session, writes new ledger entries through
after every decision and then fires the best-effort match side effects.

A session that ends (closed, expired or dropped by a preference change) while
Redis is refusing its ledger writes is parked and retried; its ids still count
as decided when the viewer opens a new session.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

import ulid

from rosematch.domain.chat.service import ConversationService
from rosematch.domain.discovery.exceptions import ProfileNotFound, SessionNotFound
from rosematch.domain.discovery.ledger import BufferedSwipeLedger
from rosematch.domain.discovery.models import Decision, MatchEvent, Profile
from rosematch.domain.discovery.resolver import MatchResolver, RandomSource, UniformSource
from rosematch.domain.discovery.schemas import (
	DecisionResponse,
	PreferencesPayload,
	PreferencesResponse,
	ProfileCard,
	ProfileUpdate,
	SessionView,
	UndoResponse,
)
from rosematch.domain.discovery.selector import select_candidates
from rosematch.domain.discovery.session import DecisionSession
from rosematch.domain.discovery.store import ProfileStore, RedisLedgerStore
from rosematch.domain.social import notifications
from rosematch.obs import metrics as obs_metrics
from rosematch.settings import settings

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _SessionEntry:
	session_id: str
	viewer_id: str
	session: DecisionSession
	ledger: BufferedSwipeLedger
	expires_at: float
	pending_matches: List[MatchEvent] = field(default_factory=list)
	lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionRegistry:
	"""In-process map of open sessions with idle expiry.

	Sessions leaving the map with unsaved ledger ids are parked in a backlog
	until the service has written those ids through.
	"""

	def __init__(self, ttl_seconds: float | None = None, *, clock: Callable[[], float] = time.monotonic) -> None:
		self._ttl = float(ttl_seconds if ttl_seconds is not None else settings.discovery_session_ttl_seconds)
		self._clock = clock
		self._entries: Dict[str, _SessionEntry] = {}
		self._unflushed: List[_SessionEntry] = []

	def deadline(self) -> float:
		return self._clock() + self._ttl

	def add(self, entry: _SessionEntry) -> None:
		self.prune()
		self._entries[entry.session_id] = entry

	def get(self, viewer_id: str, session_id: str) -> _SessionEntry:
		entry = self._entries.get(session_id)
		if entry is None or entry.viewer_id != str(viewer_id):
			raise SessionNotFound()
		if entry.expires_at <= self._clock():
			self._evict(session_id)
			raise SessionNotFound("session_expired")
		entry.expires_at = self.deadline()
		return entry

	def discard(self, session_id: str) -> Optional[_SessionEntry]:
		return self._entries.pop(session_id, None)

	def discard_for_viewer(self, viewer_id: str) -> List[_SessionEntry]:
		stale = [sid for sid, entry in self._entries.items() if entry.viewer_id == str(viewer_id)]
		return [self._entries.pop(sid) for sid in stale]

	def prune(self) -> int:
		now = self._clock()
		expired = [sid for sid, entry in self._entries.items() if entry.expires_at <= now]
		for sid in expired:
			self._evict(sid)
		return len(expired)

	def park(self, entry: _SessionEntry) -> None:
		if entry.ledger.pending_ids() and all(parked is not entry for parked in self._unflushed):
			self._unflushed.append(entry)

	def take_unflushed(self) -> List[_SessionEntry]:
		entries, self._unflushed = self._unflushed, []
		return entries

	def unflushed_ids(self, viewer_id: str) -> Set[str]:
		ids: Set[str] = set()
		for entry in self._unflushed:
			if entry.viewer_id == str(viewer_id):
				ids.update(entry.ledger.pending_ids())
		return ids

	def _evict(self, session_id: str) -> None:
		entry = self._entries.pop(session_id, None)
		if entry is not None:
			self.park(entry)

	def __len__(self) -> int:
		return len(self._entries)


def _default_source() -> UniformSource:
	return RandomSource(settings.discovery_random_seed)


def _session_view(entry: _SessionEntry) -> SessionView:
	session = entry.session
	current = session.current()
	upcoming = session.peek_next()
	return SessionView(
		session_id=entry.session_id,
		state=session.state,
		cursor=session.cursor,
		total=len(session.candidates),
		remaining=session.remaining,
		current=ProfileCard.from_profile(current) if current else None,
		next=ProfileCard.from_profile(upcoming) if upcoming else None,
		can_undo=bool(session.history),
	)


class DiscoveryService:
	def __init__(
		self,
		*,
		profiles: ProfileStore | None = None,
		ledger_store: RedisLedgerStore | None = None,
		conversations: ConversationService | None = None,
		registry: SessionRegistry | None = None,
		source_factory: Callable[[], UniformSource] | None = None,
		probability: float | None = None,
	) -> None:
		self._profiles = profiles or ProfileStore()
		self._ledger_store = ledger_store or RedisLedgerStore()
		self._conversations = conversations or ConversationService()
		self._registry = registry or SessionRegistry()
		self._source_factory = source_factory or _default_source
		self._probability = settings.discovery_match_probability if probability is None else probability

	@property
	def registry(self) -> SessionRegistry:
		return self._registry

	async def open_session(self, viewer_id: str) -> SessionView:
		self._registry.prune()
		await self._flush_parked()
		viewer = await self._profiles.get_profile(viewer_id)
		if viewer is None:
			raise ProfileNotFound()
		prefs = await self._profiles.get_preferences(viewer.id)
		all_profiles = await self._profiles.get_all_profiles()
		decided = await self._ledger_store.load_decided(viewer.id)
		# Ids still waiting on a Redis write are decided all the same.
		decided |= self._registry.unflushed_ids(viewer.id)
		candidates = select_candidates(viewer, all_profiles, decided, prefs)

		ledger = BufferedSwipeLedger(decided)
		pending: List[MatchEvent] = []
		resolver = MatchResolver(self._source_factory(), probability=self._probability, listener=pending.append)
		entry = _SessionEntry(
			session_id=str(ulid.new()),
			viewer_id=viewer.id,
			session=DecisionSession(viewer.id, candidates, ledger, resolver),
			ledger=ledger,
			expires_at=self._registry.deadline(),
			pending_matches=pending,
		)
		self._registry.add(entry)
		obs_metrics.inc_session_opened(len(candidates))
		log.info(
			"discovery_session_opened",
			extra={"viewer_id": viewer.id, "session_id": entry.session_id, "candidates": len(candidates)},
		)
		return _session_view(entry)

	async def get_session(self, viewer_id: str, session_id: str) -> SessionView:
		entry = await self._lookup(viewer_id, session_id)
		return _session_view(entry)

	async def decide(self, viewer_id: str, session_id: str, decision: Decision) -> DecisionResponse:
		entry = await self._lookup(viewer_id, session_id)
		async with entry.lock:
			result = entry.session.decide(decision)
			obs_metrics.inc_decision(result.decision.value, result.matched)
			await self._flush_ledger(entry)
			conversations = await self._dispatch_matches(entry, result.candidate)
			conversation_id = conversations.get(result.candidate.id)
			if result.matched and result.candidate.id not in conversations:
				# Re-decided after undo: the event already fired, the conversation exists.
				conversation_id = await self._existing_conversation(entry.viewer_id, result.candidate.id)
			return DecisionResponse(
				candidate_id=result.candidate.id,
				decision=result.decision,
				matched=result.matched,
				conversation_id=conversation_id,
				session=_session_view(entry),
			)

	async def undo(self, viewer_id: str, session_id: str) -> UndoResponse:
		entry = await self._lookup(viewer_id, session_id)
		async with entry.lock:
			result = entry.session.undo()
			obs_metrics.inc_undo("undone" if result.undone else "empty")
			return UndoResponse(
				undone=result.undone,
				candidate_id=result.candidate.id if result.candidate else None,
				session=_session_view(entry),
			)

	async def close_session(self, viewer_id: str, session_id: str) -> None:
		entry = await self._lookup(viewer_id, session_id)
		self._registry.discard(session_id)
		await self._retire(entry)

	async def get_preferences(self, viewer_id: str) -> PreferencesResponse:
		profile = await self._profiles.get_profile(viewer_id)
		if profile is None:
			raise ProfileNotFound()
		prefs = await self._profiles.get_preferences(viewer_id)
		return PreferencesResponse.from_preferences(prefs, purpose=profile.purpose)

	async def update_preferences(self, viewer_id: str, payload: PreferencesPayload) -> PreferencesResponse:
		"""Persist new filters; open sessions for the viewer are retired."""
		prefs = payload.to_preferences()
		profile = await self._profiles.save_preferences(viewer_id, prefs, purpose=payload.purpose)
		if profile is None:
			raise ProfileNotFound()
		dropped = self._registry.discard_for_viewer(viewer_id)
		for entry in dropped:
			await self._retire(entry)
		log.info("discovery_preferences_updated", extra={"viewer_id": str(viewer_id), "sessions_dropped": len(dropped)})
		return PreferencesResponse.from_preferences(prefs, purpose=profile.purpose)

	async def get_profile(self, viewer_id: str) -> ProfileCard:
		profile = await self._profiles.get_profile(viewer_id)
		if profile is None:
			raise ProfileNotFound()
		return ProfileCard.from_profile(profile)

	async def upsert_profile(self, viewer_id: str, update: ProfileUpdate) -> ProfileCard:
		existing = await self._profiles.get_profile(viewer_id)
		profile = Profile(
			id=str(viewer_id),
			name=update.name,
			age=update.age,
			purpose=update.purpose,
			interests=tuple(update.interests),
			verified=update.verified,
			distance_miles=update.distance_miles,
			images=tuple(update.images),
			gender=update.gender,
			bio=update.bio,
			location=update.location,
			preferences=existing.preferences if existing else None,
		)
		await self._profiles.upsert_profile(profile)
		return ProfileCard.from_profile(profile)

	async def _lookup(self, viewer_id: str, session_id: str) -> _SessionEntry:
		try:
			return self._registry.get(viewer_id, session_id)
		finally:
			# An expired lookup parks the session; write its ledger out now.
			await self._flush_parked()

	async def _retire(self, entry: _SessionEntry) -> None:
		"""Flush a session leaving the registry, parking it if Redis refuses."""
		async with entry.lock:
			if not await self._flush_ledger(entry):
				self._registry.park(entry)

	async def _flush_parked(self) -> None:
		for entry in self._registry.take_unflushed():
			await self._retire(entry)

	async def _flush_ledger(self, entry: _SessionEntry) -> bool:
		pending = entry.ledger.drain()
		if not pending:
			return True
		try:
			await self._ledger_store.persist_decided(entry.viewer_id, pending)
		except Exception:
			entry.ledger.requeue(pending)
			obs_metrics.inc_side_effect_failure("ledger")
			log.warning(
				"discovery_ledger_persist_failed",
				extra={"viewer_id": entry.viewer_id, "pending": len(pending)},
				exc_info=True,
			)
			return False
		return True

	async def _existing_conversation(self, viewer_id: str, candidate_id: str) -> Optional[str]:
		try:
			handle = await self._conversations.create_or_get_conversation(viewer_id, candidate_id)
		except Exception:
			obs_metrics.inc_side_effect_failure("conversation")
			log.warning(
				"discovery_conversation_failed",
				extra={"viewer_id": viewer_id, "candidate_id": candidate_id},
				exc_info=True,
			)
			return None
		return handle.conversation_id

	async def _dispatch_matches(self, entry: _SessionEntry, candidate: Profile) -> Dict[str, Optional[str]]:
		"""Create conversations and notify for queued matches.

		Returns candidate id -> conversation id (None when creation failed)
		for every event dispatched.
		"""
		events = list(entry.pending_matches)
		entry.pending_matches.clear()
		conversations: Dict[str, Optional[str]] = {}
		for event in events:
			handle = None
			conversations[event.candidate_id] = None
			try:
				handle = await self._conversations.create_or_get_conversation(event.viewer_id, event.candidate_id)
				conversations[event.candidate_id] = handle.conversation_id
			except Exception:
				obs_metrics.inc_side_effect_failure("conversation")
				log.warning(
					"discovery_conversation_failed",
					extra={"viewer_id": event.viewer_id, "candidate_id": event.candidate_id},
					exc_info=True,
				)
			if handle is not None and not handle.created:
				# Another session already matched this pair and notified.
				continue
			peer_name = candidate.name if candidate.id == event.candidate_id else event.candidate_id
			try:
				await notifications.notify_match(
					event.viewer_id,
					peer_name=peer_name,
					conversation_id=handle.conversation_id if handle else None,
				)
			except Exception:
				obs_metrics.inc_side_effect_failure("notification")
				log.warning(
					"discovery_notification_failed",
					extra={"viewer_id": event.viewer_id, "candidate_id": event.candidate_id},
					exc_info=True,
				)
		return conversations


_service = DiscoveryService()


async def open_session(viewer_id: str) -> SessionView:
	return await _service.open_session(viewer_id)


async def get_session(viewer_id: str, session_id: str) -> SessionView:
	return await _service.get_session(viewer_id, session_id)


async def decide(viewer_id: str, session_id: str, decision: Decision) -> DecisionResponse:
	return await _service.decide(viewer_id, session_id, decision)


async def undo(viewer_id: str, session_id: str) -> UndoResponse:
	return await _service.undo(viewer_id, session_id)


async def close_session(viewer_id: str, session_id: str) -> None:
	await _service.close_session(viewer_id, session_id)


async def get_preferences(viewer_id: str) -> PreferencesResponse:
	return await _service.get_preferences(viewer_id)


async def update_preferences(viewer_id: str, payload: PreferencesPayload) -> PreferencesResponse:
	return await _service.update_preferences(viewer_id, payload)


async def get_profile(viewer_id: str) -> ProfileCard:
	return await _service.get_profile(viewer_id)


async def upsert_profile(viewer_id: str, update: ProfileUpdate) -> ProfileCard:
	return await _service.upsert_profile(viewer_id, update)
