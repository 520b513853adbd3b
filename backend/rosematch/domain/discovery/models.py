"""Domain models for discovery: profiles, preferences, decisions and matches."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from rosematch.domain.discovery.exceptions import ConfigurationError

MIN_AGE = 18
MAX_AGE = 99
DEFAULT_RADIUS_MILES = 50.0
MATCH_PROBABILITY = 0.4
GENDER_EVERYONE = "Everyone"


class Decision(str, Enum):
	"""What the viewer did with the current card."""

	REJECT = "reject"
	ACCEPT = "accept"
	SUPER_ACCEPT = "super_accept"

	@classmethod
	def _missing_(cls, value: object) -> Optional["Decision"]:
		# Swipe directions used by the mobile client.
		aliases = {"left": cls.REJECT, "right": cls.ACCEPT, "up": cls.SUPER_ACCEPT}
		if isinstance(value, str):
			lowered = value.strip().lower()
			if lowered in aliases:
				return aliases[lowered]
			for member in cls:
				if member.value == lowered:
					return member
		return None


class SessionState(str, Enum):
	ACTIVE = "active"
	EXHAUSTED = "exhausted"


@dataclass(frozen=True, slots=True)
class Preferences:
	"""Discovery filters owned by the viewer's profile.

	Construction enforces the invariants instead of clamping, so bad upstream
	data surfaces as a ConfigurationError.
	"""

	radius: float = DEFAULT_RADIUS_MILES
	age_range: Tuple[int, int] = (MIN_AGE, MAX_AGE)
	strict_match: bool = False
	verified_only: bool = False
	gender: Optional[str] = GENDER_EVERYONE

	def __post_init__(self) -> None:
		try:
			radius = float(self.radius)
		except (TypeError, ValueError):
			raise ConfigurationError("invalid_radius") from None
		if math.isnan(radius) or radius < 0:
			raise ConfigurationError("invalid_radius")
		try:
			low, high = (int(bound) for bound in self.age_range)
		except (TypeError, ValueError):
			raise ConfigurationError("invalid_age_range") from None
		if not (MIN_AGE <= low <= MAX_AGE and MIN_AGE <= high <= MAX_AGE):
			raise ConfigurationError("age_out_of_bounds")
		if low > high:
			raise ConfigurationError("age_range_inverted")
		object.__setattr__(self, "radius", radius)
		object.__setattr__(self, "age_range", (low, high))

	@property
	def min_age(self) -> int:
		return self.age_range[0]

	@property
	def max_age(self) -> int:
		return self.age_range[1]

	@property
	def gender_filter(self) -> Optional[str]:
		"""Gender a candidate must have, or None when everyone is shown."""
		if not self.gender or self.gender.strip().lower() == GENDER_EVERYONE.lower():
			return None
		return self.gender.strip()

	@classmethod
	def from_record(cls, record: dict) -> "Preferences":
		age_range = record.get("age_range") or (MIN_AGE, MAX_AGE)
		return cls(
			radius=record.get("radius", DEFAULT_RADIUS_MILES),
			age_range=(age_range[0], age_range[1]),
			strict_match=bool(record.get("strict_match", False)),
			verified_only=bool(record.get("verified_only", False)),
			gender=record.get("gender") or GENDER_EVERYONE,
		)

	def to_record(self) -> dict[str, Any]:
		return {
			"radius": self.radius,
			"age_range": list(self.age_range),
			"strict_match": self.strict_match,
			"verified_only": self.verified_only,
			"gender": self.gender,
		}


@dataclass(frozen=True, slots=True)
class Profile:
	"""A user profile as read from the Profile Store.

	``distance_miles`` is precomputed upstream relative to the viewer.
	"""

	id: str
	name: str
	age: int
	purpose: str
	interests: Tuple[str, ...] = ()
	verified: bool = False
	distance_miles: float = 0.0
	images: Tuple[str, ...] = ()
	gender: Optional[str] = None
	bio: str = ""
	location: str = ""
	preferences: Optional[Preferences] = None

	@classmethod
	def from_record(cls, record: dict) -> "Profile":
		prefs = record.get("preferences")
		return cls(
			id=str(record["id"]),
			name=str(record.get("name") or ""),
			age=int(record["age"]),
			purpose=str(record.get("purpose") or ""),
			interests=tuple(str(tag) for tag in record.get("interests") or ()),
			verified=bool(record.get("verified", False)),
			distance_miles=float(record.get("distance_miles") or 0.0),
			images=tuple(str(ref) for ref in record.get("images") or ()),
			gender=record.get("gender"),
			bio=str(record.get("bio") or ""),
			location=str(record.get("location") or ""),
			preferences=Preferences.from_record(prefs) if prefs else None,
		)

	def to_record(self) -> dict[str, Any]:
		return {
			"id": self.id,
			"name": self.name,
			"age": self.age,
			"purpose": self.purpose,
			"interests": list(self.interests),
			"verified": self.verified,
			"distance_miles": self.distance_miles,
			"images": list(self.images),
			"gender": self.gender,
			"bio": self.bio,
			"location": self.location,
			"preferences": self.preferences.to_record() if self.preferences else None,
		}


@dataclass(frozen=True, slots=True)
class MatchEvent:
	"""Emitted once when a decision resolves to a match."""

	viewer_id: str
	candidate_id: str
	decision: Decision
	created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
