"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

REQUEST_COUNTER = Counter(
	"hackmate_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"hackmate_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

INVITES_SENT = Counter(
	"hackmate_invites_sent_total",
	"Invitations created",
)

INVITE_SEND_REJECTS = Counter(
	"hackmate_invites_send_rejects_total",
	"Invitation sends rejected",
	["reason"],
)

INVITES_RESPONDED = Counter(
	"hackmate_invites_responded_total",
	"Invitations resolved by their receiver",
	["decision"],
)

MATCH_UPSERTS = Counter(
	"hackmate_match_upserts_total",
	"Match get-or-create calls by outcome",
	["result"],
)

CONVERSATION_UPSERTS = Counter(
	"hackmate_conversation_upserts_total",
	"Conversation find-or-create calls by outcome",
	["result"],
)

CHAT_SEND = Counter(
	"hackmate_chat_messages_sent_total",
	"Messages appended to conversations",
)

CHAT_SEND_REJECTS = Counter(
	"hackmate_chat_send_rejects_total",
	"Message sends rejected",
	["reason"],
)

CHAT_READ_UPDATES = Counter(
	"hackmate_chat_messages_marked_read_total",
	"Messages flipped to read",
)

NOTIFICATIONS = Counter(
	"hackmate_notifications_total",
	"Notification deliveries by template and outcome",
	["kind", "result"],
)

NOTIFICATIONS_PENDING = Gauge(
	"hackmate_notifications_pending",
	"Notification deliveries scheduled but not finished",
)

RATE_LIMITED = Counter(
	"hackmate_rate_limited_total",
	"Requests rejected by the rate limiter",
	["kind", "rule"],
)

READINESS = Gauge(
	"hackmate_dependency_up",
	"Dependency readiness (1 = up)",
	["dependency"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_invite_sent() -> None:
	INVITES_SENT.inc()


def inc_invite_send_reject(reason: str) -> None:
	INVITE_SEND_REJECTS.labels(reason=reason).inc()


def inc_invite_responded(decision: str) -> None:
	INVITES_RESPONDED.labels(decision=decision.lower()).inc()


def inc_match_upsert(created: bool) -> None:
	MATCH_UPSERTS.labels(result="created" if created else "existing").inc()


def inc_conversation_upsert(created: bool) -> None:
	CONVERSATION_UPSERTS.labels(result="created" if created else "existing").inc()


def inc_chat_send() -> None:
	CHAT_SEND.inc()


def inc_chat_send_reject(reason: str) -> None:
	CHAT_SEND_REJECTS.labels(reason=reason).inc()


def inc_chat_read(count: int) -> None:
	if count > 0:
		CHAT_READ_UPDATES.inc(count)


def inc_notification(kind: str, result: str) -> None:
	NOTIFICATIONS.labels(kind=kind, result=result).inc()


def set_notifications_pending(count: int) -> None:
	NOTIFICATIONS_PENDING.set(count)


def inc_rate_limited(kind: str, rule: str) -> None:
	RATE_LIMITED.labels(kind=kind, rule=rule).inc()


def mark_dependency(name: str, ok: bool) -> None:
	READINESS.labels(dependency=name).set(1 if ok else 0)
