"""Swipe ledger: the per-viewer set of candidate ids already decided on."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Protocol


class SwipeLedger(Protocol):
	def has_decided(self, candidate_id: str) -> bool: ...

	def mark_decided(self, candidate_id: str) -> None: ...


class InMemorySwipeLedger:
	"""Set-backed ledger; marking an id twice is a no-op."""

	def __init__(self, decided: Iterable[str] = ()) -> None:
		self._decided: set[str] = {str(candidate_id) for candidate_id in decided}

	def has_decided(self, candidate_id: str) -> bool:
		return str(candidate_id) in self._decided

	def mark_decided(self, candidate_id: str) -> None:
		self._decided.add(str(candidate_id))

	def decided_ids(self) -> FrozenSet[str]:
		return frozenset(self._decided)

	def __contains__(self, candidate_id: object) -> bool:
		return str(candidate_id) in self._decided

	def __len__(self) -> int:
		return len(self._decided)


class BufferedSwipeLedger(InMemorySwipeLedger):
	"""Ledger seeded from durable storage that remembers unsaved ids.

	The async service drains the pending ids after each decision and writes
	them through to Redis. Ids that fail to persist are requeued.
	"""

	def __init__(self, decided: Iterable[str] = ()) -> None:
		super().__init__(decided)
		self._pending: List[str] = []

	def mark_decided(self, candidate_id: str) -> None:
		candidate_id = str(candidate_id)
		if candidate_id in self._decided:
			return
		super().mark_decided(candidate_id)
		self._pending.append(candidate_id)

	def drain(self) -> List[str]:
		pending, self._pending = self._pending, []
		return pending

	def requeue(self, candidate_ids: Iterable[str]) -> None:
		for candidate_id in candidate_ids:
			if candidate_id not in self._pending:
				self._pending.append(candidate_id)

	def pending_ids(self) -> List[str]:
		return list(self._pending)
