"""Per-user request budgets enforced in front of write endpoints."""

from __future__ import annotations

from fastapi import Depends

from hackmate.infra import rate_limit
from hackmate.infra.auth import AuthenticatedUser, get_current_user
from hackmate.settings import settings

_MINUTE = 60
_DAY = 24 * 60 * 60


async def invite_quota(auth_user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
	await rate_limit.enforce(
		"invite",
		auth_user.id,
		(
			("minute", settings.invite_per_minute, _MINUTE),
			("day", settings.invite_per_day, _DAY),
		),
	)
	return auth_user


async def message_quota(auth_user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
	await rate_limit.enforce(
		"message",
		auth_user.id,
		(("minute", settings.message_per_minute, _MINUTE),),
	)
	return auth_user
