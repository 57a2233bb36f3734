"""Process-local store used when ``STORE_BACKEND=memory`` and by the test suite.

Tables are plain dicts guarded by a single ``asyncio.Lock``. The uniqueness
rules mirror the SQL schema: matches and conversations are keyed by their
canonical pair, and at most one pending invitation exists per ordered pair.
Callers take ``db.lock`` themselves so multi-table writes (accepting an
invitation creates a match) stay atomic.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

PairIndex = Tuple[str, str]


class MemoryDatabase:
	def __init__(self) -> None:
		self.lock = asyncio.Lock()
		self.users: Dict[str, Dict[str, Any]] = {}
		self.invitations: Dict[str, Dict[str, Any]] = {}
		self.matches: Dict[PairIndex, Dict[str, Any]] = {}
		self.conversations: Dict[PairIndex, Dict[str, Any]] = {}
		self.messages: Dict[str, List[Dict[str, Any]]] = {}
		self._seq = 0
		self._last_ts: Optional[datetime] = None

	def reset(self) -> None:
		self.lock = asyncio.Lock()
		self.users.clear()
		self.invitations.clear()
		self.matches.clear()
		self.conversations.clear()
		self.messages.clear()
		self._seq = 0
		self._last_ts = None

	def now(self) -> datetime:
		"""Return a UTC timestamp strictly later than any previously issued one."""
		ts = datetime.now(timezone.utc)
		if self._last_ts is not None and ts <= self._last_ts:
			ts = self._last_ts + timedelta(microseconds=1)
		self._last_ts = ts
		return ts

	def next_seq(self) -> int:
		self._seq += 1
		return self._seq

	def insert_if_absent(
		self,
		table: Dict[PairIndex, Dict[str, Any]],
		key: PairIndex,
		factory: Callable[[], Dict[str, Any]],
	) -> Tuple[Dict[str, Any], bool]:
		"""Insert ``factory()`` under ``key`` unless a row exists. Caller holds ``lock``."""
		existing = table.get(key)
		if existing is not None:
			return existing, False
		row = factory()
		table[key] = row
		return row, True

	def conversation_by_id(self, conversation_id: str) -> Optional[Dict[str, Any]]:
		for row in self.conversations.values():
			if row["id"] == conversation_id:
				return row
		return None

	def add_user(
		self,
		user_id: str,
		*,
		username: Optional[str] = None,
		display_name: Optional[str] = None,
		email: Optional[str] = None,
		avatar_url: Optional[str] = None,
		bio: Optional[str] = None,
		skills: Tuple[str, ...] = (),
	) -> Dict[str, Any]:
		row = {
			"id": user_id,
			"username": username or user_id,
			"display_name": display_name,
			"email": email,
			"avatar_url": avatar_url,
			"bio": bio,
			"skills": list(skills),
		}
		self.users[user_id] = row
		return row


_DB = MemoryDatabase()


def get_memory_db() -> MemoryDatabase:
	return _DB
