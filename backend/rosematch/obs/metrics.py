"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram


REQUEST_COUNTER = Counter(
	"rosematch_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"rosematch_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

DISCOVERY_SESSIONS_OPENED = Counter(
	"rosematch_discovery_sessions_opened_total",
	"Discovery decision sessions opened",
)

DISCOVERY_CANDIDATE_POOL = Histogram(
	"rosematch_discovery_candidate_pool_size",
	"Number of candidates selected when a session opens",
	buckets=(0, 1, 5, 10, 25, 50, 100, 250, 500, 1000),
)

DISCOVERY_DECISIONS = Counter(
	"rosematch_discovery_decisions_total",
	"Decisions applied to discovery sessions",
	["decision"],
)

DISCOVERY_MATCHES = Counter(
	"rosematch_discovery_matches_total",
	"Decisions resolved as matches",
	["decision"],
)

DISCOVERY_UNDO = Counter(
	"rosematch_discovery_undo_total",
	"Undo requests by outcome",
	["result"],
)

DISCOVERY_SIDE_EFFECT_FAILURES = Counter(
	"rosematch_discovery_side_effect_failures_total",
	"Best-effort side effects that failed after a decision",
	["effect"],
)

CHAT_CONVERSATIONS = Counter(
	"rosematch_chat_conversations_total",
	"Conversation create-or-get calls by outcome",
	["result"],
)

NOTIFICATIONS_EMITTED = Counter(
	"rosematch_notifications_emitted_total",
	"Notifications persisted per kind",
	["kind"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_session_opened(pool_size: int) -> None:
	DISCOVERY_SESSIONS_OPENED.inc()
	DISCOVERY_CANDIDATE_POOL.observe(pool_size)


def inc_decision(decision: str, matched: bool) -> None:
	DISCOVERY_DECISIONS.labels(decision=decision).inc()
	if matched:
		DISCOVERY_MATCHES.labels(decision=decision).inc()


def inc_undo(result: str) -> None:
	DISCOVERY_UNDO.labels(result=result).inc()


def inc_side_effect_failure(effect: str) -> None:
	DISCOVERY_SIDE_EFFECT_FAILURES.labels(effect=effect).inc()


def inc_conversation(result: str) -> None:
	CHAT_CONVERSATIONS.labels(result=result).inc()


def inc_notification(kind: str) -> None:
	NOTIFICATIONS_EMITTED.labels(kind=kind).inc()
