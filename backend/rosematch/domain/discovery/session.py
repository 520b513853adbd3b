"""One-card-at-a-time decision session over a fixed candidate list.

The session is synchronous and holds no locks: callers must serialise
``decide`` and ``undo`` on a given instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rosematch.domain.discovery.exceptions import InvalidState
from rosematch.domain.discovery.ledger import SwipeLedger
from rosematch.domain.discovery.models import Decision, Profile, SessionState
from rosematch.domain.discovery.resolver import MatchResolver

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecisionResult:
	candidate: Profile
	decision: Decision
	matched: bool
	cursor: int
	exhausted: bool


@dataclass(frozen=True, slots=True)
class UndoResult:
	undone: bool
	candidate: Optional[Profile]
	cursor: int


class DecisionSession:
	"""Cursor over ``candidates`` with single-step undo.

	Invariant: ``0 <= cursor <= len(candidates)``; the session is EXHAUSTED
	exactly when the cursor sits past the last candidate. Undo rewinds the
	cursor only; ledger entries and fired matches are kept.
	"""

	def __init__(
		self,
		viewer_id: str,
		candidates: Sequence[Profile],
		ledger: SwipeLedger,
		resolver: MatchResolver,
	) -> None:
		self._viewer_id = str(viewer_id)
		self._candidates: Tuple[Profile, ...] = tuple(candidates)
		self._ledger = ledger
		self._resolver = resolver
		self._cursor = 0
		self._history: List[Profile] = []

	@property
	def viewer_id(self) -> str:
		return self._viewer_id

	@property
	def candidates(self) -> Tuple[Profile, ...]:
		return self._candidates

	@property
	def cursor(self) -> int:
		return self._cursor

	@property
	def history(self) -> Tuple[Profile, ...]:
		return tuple(self._history)

	@property
	def ledger(self) -> SwipeLedger:
		return self._ledger

	@property
	def state(self) -> SessionState:
		if self._cursor >= len(self._candidates):
			return SessionState.EXHAUSTED
		return SessionState.ACTIVE

	@property
	def is_exhausted(self) -> bool:
		return self.state is SessionState.EXHAUSTED

	@property
	def remaining(self) -> int:
		return len(self._candidates) - self._cursor

	def current(self) -> Optional[Profile]:
		if self.is_exhausted:
			return None
		return self._candidates[self._cursor]

	def peek_next(self) -> Optional[Profile]:
		index = self._cursor + 1
		if index < len(self._candidates):
			return self._candidates[index]
		return None

	def decide(self, decision: Decision) -> DecisionResult:
		candidate = self.current()
		if candidate is None:
			raise InvalidState()
		decision = Decision(decision)
		self._ledger.mark_decided(candidate.id)
		matched = self._resolver.settle(self._viewer_id, candidate.id, decision)
		# History and cursor move together so no half-applied decision is visible.
		self._history.append(candidate)
		self._cursor += 1
		log.debug(
			"discovery_decision",
			extra={
				"viewer_id": self._viewer_id,
				"candidate_id": candidate.id,
				"decision": decision.value,
				"matched": matched,
				"cursor": self._cursor,
			},
		)
		return DecisionResult(
			candidate=candidate,
			decision=decision,
			matched=matched,
			cursor=self._cursor,
			exhausted=self.is_exhausted,
		)

	def undo(self) -> UndoResult:
		if not self._history:
			return UndoResult(undone=False, candidate=None, cursor=self._cursor)
		candidate = self._history.pop()
		self._cursor -= 1
		return UndoResult(undone=True, candidate=candidate, cursor=self._cursor)
