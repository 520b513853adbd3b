"""Match resolution for forward decisions.

The entropy source is injected so tests (and replays) can pin outcomes.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Iterable, Optional, Protocol

from rosematch.domain.discovery.models import MATCH_PROBABILITY, Decision, MatchEvent
from rosematch.obs import metrics as obs_metrics

log = logging.getLogger(__name__)

MatchListener = Callable[[MatchEvent], None]


class UniformSource(Protocol):
	def next_uniform(self) -> float:
		"""Return a float uniformly drawn from [0, 1)."""
		...


class RandomSource:
	"""Uniform source backed by ``random.Random``; not cryptographically secure."""

	def __init__(self, seed: Optional[int] = None) -> None:
		self._rng = random.Random(seed)

	def next_uniform(self) -> float:
		return self._rng.random()


class FixedSource:
	"""Replays a scripted sequence of draws, cycling when exhausted."""

	def __init__(self, values: Iterable[float]) -> None:
		self._values = [float(value) for value in values]
		if not self._values:
			raise ValueError("FixedSource needs at least one value")
		self._index = 0

	def next_uniform(self) -> float:
		value = self._values[self._index % len(self._values)]
		self._index += 1
		return value


class MatchResolver:
	def __init__(
		self,
		source: UniformSource | None = None,
		*,
		probability: float = MATCH_PROBABILITY,
		listener: MatchListener | None = None,
	) -> None:
		if not 0.0 <= probability <= 1.0:
			raise ValueError("probability must be within [0, 1]")
		self._source = source or RandomSource()
		self._probability = probability
		self._listener = listener
		self._emitted: set[tuple[str, str]] = set()

	def resolve(self, decision: Decision) -> bool:
		"""Return whether ``decision`` produces a match.

		REJECT never matches and SUPER_ACCEPT always does; neither consumes a
		draw. ACCEPT matches when the draw falls below the probability.
		"""
		if decision is Decision.REJECT:
			return False
		if decision is Decision.SUPER_ACCEPT:
			return True
		return self._source.next_uniform() < self._probability

	def settle(self, viewer_id: str, candidate_id: str, decision: Decision) -> bool:
		"""Resolve ``decision`` and emit a MatchEvent the first time a pair matches."""
		matched = self.resolve(decision)
		if matched:
			self._emit(MatchEvent(viewer_id=viewer_id, candidate_id=candidate_id, decision=decision))
		return matched

	def _emit(self, event: MatchEvent) -> None:
		key = (event.viewer_id, event.candidate_id)
		if key in self._emitted:
			return
		self._emitted.add(key)
		if self._listener is None:
			return
		try:
			self._listener(event)
		except Exception:
			# The swipe must still complete; the match stands.
			obs_metrics.inc_side_effect_failure("match_listener")
			log.exception(
				"match_listener_failed",
				extra={"viewer_id": event.viewer_id, "candidate_id": event.candidate_id},
			)
