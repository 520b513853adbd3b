import pytest

from rosematch.domain.discovery.resolver import FixedSource


def _headers(user_id: str, name: str | None = None) -> dict[str, str]:
	headers = {"X-User-Id": user_id}
	if name:
		headers["X-User-Name"] = name
	return headers


async def _create_profile(client, user_id: str, *, name: str, age: int = 27, distance: float = 1.0, **extra) -> None:
	body = {"name": name, "age": age, "purpose": "Coffee Date", "distance_miles": distance, **extra}
	resp = await client.put("/discovery/profile", json=body, headers=_headers(user_id))
	assert resp.status_code == 200, resp.text


async def _seed_deck(client) -> None:
	await _create_profile(client, "viewer", name="Vic", distance=0)
	await _create_profile(client, "ava", name="Ava", distance=3)
	await _create_profile(client, "bea", name="Bea", distance=1, verified=True)
	await _create_profile(client, "cal", name="Cal", distance=70)


@pytest.mark.asyncio
async def test_discovery_requires_identity(api_client):
	resp = await api_client.post("/discovery/sessions")

	assert resp.status_code == 401
	assert resp.json()["detail"] == "invalid_token"
	assert resp.json()["request_id"]


@pytest.mark.asyncio
async def test_open_session_without_profile_is_404(api_client):
	resp = await api_client.post("/discovery/sessions", headers=_headers("ghost"))

	assert resp.status_code == 404
	assert resp.json()["detail"] == "profile_not_found"


@pytest.mark.asyncio
async def test_swipe_flow_with_match_and_undo(api_client):
	await _seed_deck(api_client)

	opened = await api_client.post("/discovery/sessions", headers=_headers("viewer"))
	assert opened.status_code == 201
	view = opened.json()
	session_id = view["session_id"]
	assert view["total"] == 2
	assert view["current"]["id"] == "bea"
	assert view["next"]["id"] == "ava"

	rejected = await api_client.post(
		f"/discovery/sessions/{session_id}/decide", json={"decision": "left"}, headers=_headers("viewer")
	)
	assert rejected.status_code == 200
	assert rejected.json()["decision"] == "reject"
	assert rejected.json()["matched"] is False
	assert rejected.json()["session"]["can_undo"] is True

	undone = await api_client.post(f"/discovery/sessions/{session_id}/undo", headers=_headers("viewer"))
	assert undone.status_code == 200
	assert undone.json()["undone"] is True
	assert undone.json()["session"]["current"]["id"] == "bea"

	super_liked = await api_client.post(
		f"/discovery/sessions/{session_id}/decide", json={"decision": "SUPER_ACCEPT"}, headers=_headers("viewer")
	)
	body = super_liked.json()
	assert body["matched"] is True
	assert body["conversation_id"] == "chat:bea:viewer"
	assert body["session"]["current"]["id"] == "ava"

	chats = await api_client.get("/chats", headers=_headers("bea"))
	assert [c["conversation_id"] for c in chats.json()] == ["chat:bea:viewer"]
	assert chats.json()[0]["peer_id"] == "viewer"

	inbox = await api_client.get("/notifications", headers=_headers("viewer"))
	assert inbox.status_code == 200
	assert inbox.json()[0]["title"] == "New Match!"
	assert inbox.json()[0]["body"] == "You matched with Bea"


@pytest.mark.asyncio
async def test_plain_accept_match_uses_injected_draw(api_client, fresh_discovery_service, monkeypatch):
	monkeypatch.setattr(fresh_discovery_service, "_source_factory", lambda: FixedSource([0.1]))
	await _seed_deck(api_client)
	session_id = (await api_client.post("/discovery/sessions", headers=_headers("viewer"))).json()["session_id"]

	resp = await api_client.post(
		f"/discovery/sessions/{session_id}/decide", json={"decision": "right"}, headers=_headers("viewer")
	)

	assert resp.json()["decision"] == "accept"
	assert resp.json()["matched"] is True


@pytest.mark.asyncio
async def test_exhausted_session_returns_conflict(api_client):
	await _create_profile(api_client, "viewer", name="Vic", distance=0)
	await _create_profile(api_client, "ava", name="Ava", distance=3)
	session_id = (await api_client.post("/discovery/sessions", headers=_headers("viewer"))).json()["session_id"]
	url = f"/discovery/sessions/{session_id}/decide"

	first = await api_client.post(url, json={"decision": "REJECT"}, headers=_headers("viewer"))
	second = await api_client.post(url, json={"decision": "ACCEPT"}, headers=_headers("viewer"))

	assert first.json()["session"]["state"] == "exhausted"
	assert second.status_code == 409
	assert second.json()["detail"] == "session_exhausted"


@pytest.mark.asyncio
async def test_unknown_decision_is_validation_error(api_client):
	await _seed_deck(api_client)
	session_id = (await api_client.post("/discovery/sessions", headers=_headers("viewer"))).json()["session_id"]

	resp = await api_client.post(
		f"/discovery/sessions/{session_id}/decide", json={"decision": "down"}, headers=_headers("viewer")
	)

	assert resp.status_code == 422
	assert resp.json()["detail"] == "validation_error"


@pytest.mark.asyncio
async def test_unknown_or_foreign_session_is_404(api_client):
	await _seed_deck(api_client)
	session_id = (await api_client.post("/discovery/sessions", headers=_headers("viewer"))).json()["session_id"]

	missing = await api_client.get("/discovery/sessions/nope", headers=_headers("viewer"))
	foreign = await api_client.get(f"/discovery/sessions/{session_id}", headers=_headers("ava"))

	assert missing.status_code == 404
	assert missing.json()["detail"] == "session_not_found"
	assert foreign.status_code == 404


@pytest.mark.asyncio
async def test_close_session(api_client):
	await _seed_deck(api_client)
	session_id = (await api_client.post("/discovery/sessions", headers=_headers("viewer"))).json()["session_id"]

	closed = await api_client.delete(f"/discovery/sessions/{session_id}", headers=_headers("viewer"))
	after = await api_client.get(f"/discovery/sessions/{session_id}", headers=_headers("viewer"))

	assert closed.status_code == 204
	assert after.status_code == 404


@pytest.mark.asyncio
async def test_preferences_roundtrip_and_filtering(api_client):
	await _seed_deck(api_client)

	defaults = await api_client.get("/discovery/preferences", headers=_headers("viewer"))
	assert defaults.json()["radius"] == 50
	assert defaults.json()["age_range"] == [18, 99]

	updated = await api_client.put(
		"/discovery/preferences",
		json={"radius": 100, "age_range": [18, 40], "verified_only": True, "purpose": "Hangout"},
		headers=_headers("viewer"),
	)
	assert updated.status_code == 200
	assert updated.json()["purpose"] == "Hangout"

	view = (await api_client.post("/discovery/sessions", headers=_headers("viewer"))).json()
	assert view["total"] == 1
	assert view["current"]["id"] == "bea"


@pytest.mark.asyncio
async def test_inverted_age_range_is_rejected(api_client):
	await _seed_deck(api_client)

	resp = await api_client.put(
		"/discovery/preferences", json={"age_range": [40, 30]}, headers=_headers("viewer")
	)

	assert resp.status_code == 422
	assert resp.json()["detail"] == "age_range_inverted"


@pytest.mark.asyncio
async def test_health_live_sets_request_id(api_client):
	resp = await api_client.get("/health/live", headers={"X-Request-Id": "req-42"})

	assert resp.status_code == 200
	assert resp.json()["status"] == "ok"
	assert resp.headers["X-Request-Id"] == "req-42"
