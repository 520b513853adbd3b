"""Domain-level exceptions for the discovery engine."""

from __future__ import annotations


class DiscoveryError(Exception):
	"""Base class for discovery errors."""

	reason: str = "unknown"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class InvalidState(DiscoveryError):
	"""A decision was applied to a session that has no current candidate."""

	reason = "session_exhausted"


class ConfigurationError(DiscoveryError, ValueError):
	"""Preferences violate their invariants (age bounds, radius)."""

	reason = "invalid_preferences"


class SessionNotFound(DiscoveryError):
	reason = "session_not_found"


class ProfileNotFound(DiscoveryError):
	reason = "profile_not_found"
