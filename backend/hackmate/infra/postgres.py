"""AsyncPG pool management for the backend."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg

from hackmate.domain.common.errors import InfraError
from hackmate.settings import settings

logger = logging.getLogger(__name__)

_pool: Optional[asyncpg.pool.Pool] = None

# Failures that mean "the store is not reachable right now", as opposed to a
# query the store rejected.
_TRANSIENT_ERRORS = (
	OSError,
	asyncio.TimeoutError,
	asyncpg.InterfaceError,
	asyncpg.PostgresConnectionError,
	asyncpg.CannotConnectNowError,
	asyncpg.TooManyConnectionsError,
)


class StoreUnavailable(InfraError):
	reason = "store_unavailable"


async def init_pool() -> asyncpg.pool.Pool:
	global _pool
	if _pool is None:
		# Force 127.0.0.1 instead of localhost to avoid IPv6 issues on Windows
		dsn = settings.postgres_url.replace("localhost", "127.0.0.1")
		_pool = await asyncpg.create_pool(
			dsn=dsn,
			min_size=settings.postgres_min_pool_size,
			max_size=settings.postgres_max_pool_size,
			ssl="require" if settings.postgres_ssl else "disable",
		)
	return _pool


def set_pool(pool: Optional[asyncpg.pool.Pool]) -> None:
	global _pool
	_pool = pool


async def get_pool() -> asyncpg.pool.Pool:
	if _pool is None:
		await init_pool()
	assert _pool is not None
	return _pool


async def close_pool() -> None:
	global _pool
	if _pool is not None:
		await _pool.close()
		_pool = None


@asynccontextmanager
async def acquire() -> AsyncIterator[asyncpg.Connection]:
	"""Borrow a pooled connection, reporting connectivity loss as ``StoreUnavailable``."""
	try:
		pool = await get_pool()
		async with pool.acquire() as conn:
			yield conn
	except _TRANSIENT_ERRORS as exc:
		logger.warning("Postgres unavailable: %s", exc.__class__.__name__)
		raise StoreUnavailable() from exc
