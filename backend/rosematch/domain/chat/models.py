"""Domain models for match conversations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

MATCH_OPENER = "You matched! Say hello."


@dataclass(slots=True)
class ConversationKey:
	"""Canonical representation of a 1:1 chat conversation."""

	user_a: str
	user_b: str

	@classmethod
	def from_participants(cls, user_one: str, user_two: str) -> "ConversationKey":
		ordered = tuple(sorted((str(user_one), str(user_two))))
		return cls(user_a=ordered[0], user_b=ordered[1])

	@property
	def conversation_id(self) -> str:
		return f"chat:{self.user_a}:{self.user_b}"

	def participants(self) -> Tuple[str, str]:
		return (self.user_a, self.user_b)


@dataclass(slots=True)
class ConversationHandle:
	conversation_id: str
	user_a: str
	user_b: str
	last_message: str
	created_at: datetime
	created: bool = False

	def peer_of(self, user_id: str) -> str:
		return self.user_b if str(user_id) == self.user_a else self.user_a

	def to_record(self) -> dict:
		return {
			"conversation_id": self.conversation_id,
			"user_a": self.user_a,
			"user_b": self.user_b,
			"last_message": self.last_message,
			"created_at": self.created_at.isoformat(),
		}

	@classmethod
	def from_record(cls, record: dict, *, created: bool = False) -> "ConversationHandle":
		return cls(
			conversation_id=str(record["conversation_id"]),
			user_a=str(record["user_a"]),
			user_b=str(record["user_b"]),
			last_message=str(record.get("last_message") or ""),
			created_at=datetime.fromisoformat(record["created_at"]),
			created=created,
		)
