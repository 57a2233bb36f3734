"""Match storage.

``get_or_create`` is a single ``INSERT ... ON CONFLICT DO NOTHING`` keyed by the
canonical pair; when the insert yields nothing, another writer got there first
and the existing row is returned instead.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

import asyncpg
import ulid

from hackmate.domain.common.pairs import PairKey
from hackmate.domain.common.upsert import AlreadyExisted, Created, Upserted
from hackmate.infra import postgres
from hackmate.infra.memory import MemoryDatabase, get_memory_db
from hackmate.settings import settings

from .models import Match


async def upsert_match(conn: asyncpg.Connection, pair: PairKey) -> Upserted[Match]:
	"""Create-if-absent on ``conn``; safe to call inside an open transaction."""
	row = await conn.fetchrow(
		"""
		INSERT INTO matches (id, user_low_id, user_high_id)
		VALUES ($1, $2, $3)
		ON CONFLICT (user_low_id, user_high_id) DO NOTHING
		RETURNING id, user_low_id, user_high_id, created_at
		""",
		str(ulid.new()),
		pair.low,
		pair.high,
	)
	if row is not None:
		return Created(Match.from_record(row))
	existing = await conn.fetchrow(
		"""
		SELECT id, user_low_id, user_high_id, created_at
		FROM matches
		WHERE user_low_id = $1 AND user_high_id = $2
		""",
		pair.low,
		pair.high,
	)
	return AlreadyExisted(Match.from_record(existing))


def upsert_match_locked(db: MemoryDatabase, pair: PairKey) -> Upserted[Match]:
	"""In-memory counterpart of ``upsert_match``; caller holds ``db.lock``."""
	row, created = db.insert_if_absent(
		db.matches,
		pair.participants(),
		lambda: {
			"id": str(ulid.new()),
			"user_low_id": pair.low,
			"user_high_id": pair.high,
			"created_at": db.now(),
		},
	)
	match = Match.from_record(row)
	return Created(match) if created else AlreadyExisted(match)


class MatchRepository(Protocol):
	async def get_or_create(self, pair: PairKey) -> Upserted[Match]: ...

	async def find(self, pair: PairKey) -> Optional[Match]: ...

	async def list_for_user(self, user_id: str) -> List[Match]: ...


class PostgresMatchRepository:
	async def get_or_create(self, pair: PairKey) -> Upserted[Match]:
		async with postgres.acquire() as conn:
			return await upsert_match(conn, pair)

	async def find(self, pair: PairKey) -> Optional[Match]:
		async with postgres.acquire() as conn:
			row = await conn.fetchrow(
				"""
				SELECT id, user_low_id, user_high_id, created_at
				FROM matches
				WHERE user_low_id = $1 AND user_high_id = $2
				""",
				pair.low,
				pair.high,
			)
		return Match.from_record(row) if row else None

	async def list_for_user(self, user_id: str) -> List[Match]:
		async with postgres.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT id, user_low_id, user_high_id, created_at
				FROM matches
				WHERE user_low_id = $1 OR user_high_id = $1
				ORDER BY created_at DESC, id DESC
				""",
				str(user_id),
			)
		return [Match.from_record(row) for row in rows]


class MemoryMatchRepository:
	def __init__(self, db: MemoryDatabase | None = None) -> None:
		self._db = db or get_memory_db()

	async def get_or_create(self, pair: PairKey) -> Upserted[Match]:
		async with self._db.lock:
			return upsert_match_locked(self._db, pair)

	async def find(self, pair: PairKey) -> Optional[Match]:
		async with self._db.lock:
			row = self._db.matches.get(pair.participants())
			return Match.from_record(row) if row else None

	async def list_for_user(self, user_id: str) -> List[Match]:
		user_id = str(user_id)
		async with self._db.lock:
			rows = [row for key, row in self._db.matches.items() if user_id in key]
		matches = [Match.from_record(row) for row in rows]
		matches.sort(key=lambda m: (m.created_at, m.id), reverse=True)
		return matches


def default_repository() -> MatchRepository:
	if settings.uses_memory_store():
		return MemoryMatchRepository()
	return PostgresMatchRepository()
