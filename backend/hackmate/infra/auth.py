"""Authentication helpers for FastAPI endpoints.

Resolves the caller of a request to an ``AuthenticatedUser``:
- a Bearer JWT (HS256, settings.secret_key) is accepted in every environment;
- the ``X-User-Id`` header is honoured only in development, for local tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hackmate.domain.common.errors import Unauthenticated
from hackmate.infra import jwt as jwt_helper
from hackmate.obs import logging as obs_logging
from hackmate.settings import settings


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	handle: Optional[str] = None
	display_name: Optional[str] = None


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		# Normalise all decode failures to invalid_token for the API surface
		raise Unauthenticated("invalid_token") from None

	handle = payload.get("handle") or payload.get("username")
	display_name = payload.get("name") or payload.get("display_name")
	return AuthenticatedUser(
		id=str(payload["sub"]).strip(),
		handle=str(handle) if handle is not None else None,
		display_name=str(display_name) if display_name is not None else None,
	)


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	x_user_handle: Optional[str] = Header(default=None, alias="X-User-Handle"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user or raise ``Unauthenticated``."""
	user: AuthenticatedUser | None = None
	if credentials and credentials.scheme.lower() == "bearer":
		user = verify_access_jwt(credentials.credentials)
	elif settings.is_dev() and x_user_id and x_user_id.strip():
		user = AuthenticatedUser(id=x_user_id.strip(), handle=x_user_handle)

	if user is None:
		raise Unauthenticated("missing_credentials")
	obs_logging.bind_context(user_id=user.id)
	return user
