"""Error taxonomy shared by the invitation, match and chat domains.

Every failure a caller can observe is a ``CoreError`` carrying a ``kind`` (what
class of problem it is) and a ``reason`` (a stable, machine-readable string the
client can branch on, e.g. ``already_sent`` vs ``not_recipient``).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
	UNAUTHENTICATED = "UNAUTHENTICATED"
	INVALID_REQUEST = "INVALID_REQUEST"
	CONFLICT = "CONFLICT"
	FORBIDDEN = "FORBIDDEN"
	NOT_FOUND = "NOT_FOUND"
	INVALID_STATE = "INVALID_STATE"
	TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"
	INFRA_ERROR = "INFRA_ERROR"


class CoreError(Exception):
	"""Base class for errors surfaced to API callers."""

	kind: ErrorKind = ErrorKind.INVALID_REQUEST
	reason: str = "unknown"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class Unauthenticated(CoreError):
	kind = ErrorKind.UNAUTHENTICATED
	reason = "invalid_token"


class InvalidRequest(CoreError):
	kind = ErrorKind.INVALID_REQUEST
	reason = "invalid_request"


class Conflict(CoreError):
	kind = ErrorKind.CONFLICT
	reason = "conflict"


class Forbidden(CoreError):
	kind = ErrorKind.FORBIDDEN
	reason = "forbidden"


class NotFound(CoreError):
	kind = ErrorKind.NOT_FOUND
	reason = "not_found"


class InvalidState(CoreError):
	kind = ErrorKind.INVALID_STATE
	reason = "invalid_state"


class TooManyRequests(CoreError):
	kind = ErrorKind.TOO_MANY_REQUESTS
	reason = "rate_limited"


class InfraError(CoreError):
	"""Transient store or transport failure; the caller may retry."""

	kind = ErrorKind.INFRA_ERROR
	reason = "unavailable"
