"""User directory lookups.

Users are owned by the account system; the relationship domains only need to
check that an id exists and to resolve small projections for display and for
notification contact details.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol

from hackmate.infra import postgres
from hackmate.infra.memory import MemoryDatabase, get_memory_db
from hackmate.settings import settings

from .models import UserProfile

_USER_COLUMNS = "id, username, display_name, avatar_url, bio, skills, email"


class UserDirectory(Protocol):
	async def get(self, user_id: str) -> Optional[UserProfile]: ...

	async def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]: ...

	async def exists(self, user_id: str) -> bool: ...


class PostgresUserDirectory:
	async def get(self, user_id: str) -> Optional[UserProfile]:
		async with postgres.acquire() as conn:
			row = await conn.fetchrow(
				f"SELECT {_USER_COLUMNS} FROM users WHERE id = $1 AND deleted_at IS NULL",
				str(user_id),
			)
		return UserProfile.from_record(row) if row else None

	async def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
		ids = sorted({str(user_id) for user_id in user_ids})
		if not ids:
			return {}
		async with postgres.acquire() as conn:
			rows = await conn.fetch(
				f"SELECT {_USER_COLUMNS} FROM users WHERE id = ANY($1::text[]) AND deleted_at IS NULL",
				ids,
			)
		profiles = (UserProfile.from_record(row) for row in rows)
		return {profile.id: profile for profile in profiles}

	async def exists(self, user_id: str) -> bool:
		async with postgres.acquire() as conn:
			found = await conn.fetchval(
				"SELECT 1 FROM users WHERE id = $1 AND deleted_at IS NULL",
				str(user_id),
			)
		return found is not None


class MemoryUserDirectory:
	def __init__(self, db: MemoryDatabase | None = None) -> None:
		self._db = db or get_memory_db()

	async def get(self, user_id: str) -> Optional[UserProfile]:
		row = self._db.users.get(str(user_id))
		return UserProfile.from_record(row) if row else None

	async def get_many(self, user_ids: Iterable[str]) -> Dict[str, UserProfile]:
		result: Dict[str, UserProfile] = {}
		for user_id in user_ids:
			row = self._db.users.get(str(user_id))
			if row:
				result[row["id"]] = UserProfile.from_record(row)
		return result

	async def exists(self, user_id: str) -> bool:
		return str(user_id) in self._db.users


_DIRECTORY: UserDirectory | None = None


def get_directory() -> UserDirectory:
	global _DIRECTORY
	if _DIRECTORY is None:
		_DIRECTORY = MemoryUserDirectory() if settings.uses_memory_store() else PostgresUserDirectory()
	return _DIRECTORY


def set_directory(directory: UserDirectory | None) -> None:
	global _DIRECTORY
	_DIRECTORY = directory
