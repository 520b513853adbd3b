"""Schemas for discovery sessions, decisions and preferences."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from rosematch.domain.discovery.models import (
	DEFAULT_RADIUS_MILES,
	MAX_AGE,
	MIN_AGE,
	Decision,
	Preferences,
	Profile,
	SessionState,
)


class ProfileCard(BaseModel):
	id: str
	name: str = ""
	age: int
	purpose: str = ""
	interests: list[str] = Field(default_factory=list)
	verified: bool = False
	distance_miles: float = 0.0
	images: list[str] = Field(default_factory=list)
	gender: Optional[str] = None
	bio: str = ""
	location: str = ""

	@classmethod
	def from_profile(cls, profile: Profile) -> "ProfileCard":
		return cls(
			id=profile.id,
			name=profile.name,
			age=profile.age,
			purpose=profile.purpose,
			interests=list(profile.interests),
			verified=profile.verified,
			distance_miles=profile.distance_miles,
			images=list(profile.images),
			gender=profile.gender,
			bio=profile.bio,
			location=profile.location,
		)


class SessionView(BaseModel):
	session_id: str
	state: SessionState
	cursor: int = Field(ge=0)
	total: int = Field(ge=0)
	remaining: int = Field(ge=0)
	current: Optional[ProfileCard] = None
	next: Optional[ProfileCard] = None
	can_undo: bool = False


class DecisionPayload(BaseModel):
	decision: Decision


class DecisionResponse(BaseModel):
	candidate_id: str
	decision: Decision
	matched: bool
	conversation_id: Optional[str] = None
	session: SessionView


class UndoResponse(BaseModel):
	undone: bool
	candidate_id: Optional[str] = None
	session: SessionView


class PreferencesPayload(BaseModel):
	radius: float = Field(default=DEFAULT_RADIUS_MILES, ge=0)
	age_range: list[int] = Field(default_factory=lambda: [MIN_AGE, MAX_AGE], min_length=2, max_length=2)
	strict_match: bool = False
	verified_only: bool = False
	gender: Optional[Literal["Male", "Female", "Everyone"]] = "Everyone"
	purpose: Optional[str] = Field(default=None, max_length=80)

	def to_preferences(self) -> Preferences:
		return Preferences(
			radius=self.radius,
			age_range=(self.age_range[0], self.age_range[1]),
			strict_match=self.strict_match,
			verified_only=self.verified_only,
			gender=self.gender,
		)


class PreferencesResponse(BaseModel):
	radius: float
	age_range: list[int]
	strict_match: bool
	verified_only: bool
	gender: Optional[str] = None
	purpose: Optional[str] = None

	@classmethod
	def from_preferences(cls, prefs: Preferences, *, purpose: Optional[str] = None) -> "PreferencesResponse":
		return cls(
			radius=prefs.radius,
			age_range=list(prefs.age_range),
			strict_match=prefs.strict_match,
			verified_only=prefs.verified_only,
			gender=prefs.gender,
			purpose=purpose,
		)


class ProfileUpdate(BaseModel):
	name: str = Field(min_length=1, max_length=80)
	age: int = Field(ge=MIN_AGE, le=MAX_AGE)
	purpose: str = Field(default="", max_length=80)
	interests: list[str] = Field(default_factory=list, max_length=20)
	verified: bool = False
	distance_miles: float = Field(default=0.0, ge=0)
	images: list[str] = Field(default_factory=list, max_length=9)
	gender: Optional[str] = None
	bio: str = Field(default="", max_length=500)
	location: str = Field(default="", max_length=120)

