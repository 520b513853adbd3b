import random

from rosematch.domain.discovery.models import Preferences, Profile
from rosematch.domain.discovery.selector import select_candidates


def _profile(pid: str, *, distance: float = 1.0, age: int = 25, purpose: str = "Coffee Date", **extra) -> Profile:
	return Profile(id=pid, name=pid.upper(), age=age, purpose=purpose, distance_miles=distance, **extra)


VIEWER = _profile("viewer", distance=0.0, age=27)


def test_radius_and_age_scenario():
	prefs = Preferences(radius=10, age_range=(20, 30))
	a = _profile("a", distance=5, age=25)
	b = _profile("b", distance=20, age=25)
	c = _profile("c", distance=2, age=40)

	assert select_candidates(VIEWER, [a, b, c], set(), prefs) == [a]


def test_excludes_viewer_and_decided_ids():
	prefs = Preferences()
	others = [_profile("a"), _profile("b"), _profile("c")]

	result = select_candidates(VIEWER, [VIEWER, *others], {"b"}, prefs)

	assert [p.id for p in result] == ["a", "c"]


def test_age_bounds_are_inclusive_and_radius_edge_kept():
	prefs = Preferences(radius=10, age_range=(20, 30))
	young = _profile("young", age=20, distance=10)
	old = _profile("old", age=30, distance=3)

	assert [p.id for p in select_candidates(VIEWER, [young, old], set(), prefs)] == ["old", "young"]


def test_strict_match_requires_same_purpose():
	prefs = Preferences(strict_match=True)
	same = _profile("same", purpose="Coffee Date")
	other = _profile("other", purpose="Exercise Buddy")

	assert select_candidates(VIEWER, [same, other], set(), prefs) == [same]
	assert len(select_candidates(VIEWER, [same, other], set(), Preferences())) == 2


def test_verified_only_drops_unverified():
	prefs = Preferences(verified_only=True)
	verified = _profile("v", verified=True)
	unverified = _profile("u", verified=False)

	assert select_candidates(VIEWER, [verified, unverified], set(), prefs) == [verified]


def test_gender_filter_applies_unless_everyone():
	woman = _profile("w", gender="Female")
	man = _profile("m", gender="Male")
	unknown = _profile("x")

	only_women = select_candidates(VIEWER, [woman, man, unknown], set(), Preferences(gender="female"))
	everyone = select_candidates(VIEWER, [woman, man, unknown], set(), Preferences(gender="Everyone"))

	assert only_women == [woman]
	assert len(everyone) == 3


def test_orders_nearest_first_and_keeps_store_order_for_ties():
	far = _profile("far", distance=9)
	tie_first = _profile("tie-1", distance=3)
	near = _profile("near", distance=1)
	tie_second = _profile("tie-2", distance=3)

	result = select_candidates(VIEWER, [far, tie_first, near, tie_second], set(), Preferences())

	assert [p.id for p in result] == ["near", "tie-1", "tie-2", "far"]


def test_selection_is_deterministic_and_respects_every_filter():
	rng = random.Random(1234)
	profiles = [
		_profile(
			f"p{i}",
			distance=round(rng.uniform(0, 80), 1),
			age=rng.randint(18, 70),
			purpose=rng.choice(["Coffee Date", "Hangout"]),
			verified=rng.random() < 0.5,
		)
		for i in range(200)
	]
	decided = {f"p{i}" for i in range(0, 200, 7)}
	prefs = Preferences(radius=35, age_range=(22, 44), verified_only=True)

	first = select_candidates(VIEWER, profiles, decided, prefs)
	second = select_candidates(VIEWER, profiles, decided, prefs)

	assert first == second
	assert first
	for candidate in first:
		assert candidate.id not in decided
		assert candidate.id != VIEWER.id
		assert candidate.distance_miles <= prefs.radius
		assert prefs.min_age <= candidate.age <= prefs.max_age
		assert candidate.verified
	distances = [c.distance_miles for c in first]
	assert distances == sorted(distances)
