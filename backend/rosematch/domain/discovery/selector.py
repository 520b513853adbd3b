"""Candidate selection for a viewer's discovery session.

Pure functions only: the same inputs always produce the same ordered list.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, List

from rosematch.domain.discovery.models import Preferences, Profile


def is_eligible(viewer: Profile, candidate: Profile, decided_ids: AbstractSet[str], prefs: Preferences) -> bool:
	"""Return True when ``candidate`` passes every discovery filter for ``viewer``."""
	if candidate.id == viewer.id:
		return False
	if candidate.id in decided_ids:
		return False
	if candidate.distance_miles > prefs.radius:
		return False
	if candidate.age < prefs.min_age or candidate.age > prefs.max_age:
		return False
	if prefs.strict_match and candidate.purpose != viewer.purpose:
		return False
	if prefs.verified_only and not candidate.verified:
		return False
	wanted_gender = prefs.gender_filter
	if wanted_gender is not None and (candidate.gender or "").strip().lower() != wanted_gender.lower():
		return False
	return True


def select_candidates(
	viewer: Profile,
	all_profiles: Iterable[Profile],
	decided_ids: AbstractSet[str],
	prefs: Preferences,
) -> List[Profile]:
	"""Filter the profile set for ``viewer`` and order it nearest first.

	``sorted`` is stable, so profiles at equal distance keep the store's
	enumeration order.
	"""
	eligible = [profile for profile in all_profiles if is_eligible(viewer, profile, decided_ids, prefs)]
	return sorted(eligible, key=lambda profile: profile.distance_miles)
