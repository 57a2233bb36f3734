"""Invitation storage.

The "one outstanding invitation per ordered pair" rule is the partial unique
index ``invitations_pending_pair_uq``; a losing concurrent insert surfaces as
``InviteAlreadySent``. Resolution is a conditional update on ``status =
'PENDING'`` so a second responder never overwrites a terminal state, and an
acceptance creates the match in the same transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

import asyncpg
import ulid

from hackmate.domain.common.pairs import PairKey
from hackmate.domain.common.upsert import Upserted
from hackmate.domain.matches.models import Match
from hackmate.domain.matches.repo import upsert_match, upsert_match_locked
from hackmate.infra import postgres
from hackmate.infra.memory import MemoryDatabase, get_memory_db
from hackmate.settings import settings

from .exceptions import InviteAlreadySent, InviteUnknownReceiver, InviteUnknownSender
from .models import Invitation, InvitationBox, InvitationStatus

_INVITE_COLUMNS = "id, sender_id, receiver_id, status, message, created_at, updated_at"
_FOREIGN_KEY_ERRORS = {
	"invitations_sender_fk": InviteUnknownSender,
	"invitations_receiver_fk": InviteUnknownReceiver,
}


@dataclass(slots=True)
class Resolution:
	invitation: Invitation
	match: Optional[Upserted[Match]] = None


class InvitationRepository(Protocol):
	async def create(self, sender_id: str, receiver_id: str, message: Optional[str]) -> Invitation: ...

	async def get(self, invitation_id: str) -> Optional[Invitation]: ...

	async def resolve(self, invitation_id: str, status: InvitationStatus) -> Optional[Resolution]: ...

	async def list_for_user(self, user_id: str, box: InvitationBox) -> List[Invitation]: ...


class PostgresInvitationRepository:
	async def create(self, sender_id: str, receiver_id: str, message: Optional[str]) -> Invitation:
		async with postgres.acquire() as conn:
			try:
				row = await conn.fetchrow(
					f"""
					INSERT INTO invitations (id, sender_id, receiver_id, status, message)
					VALUES ($1, $2, $3, 'PENDING', $4)
					RETURNING {_INVITE_COLUMNS}
					""",
					str(ulid.new()),
					sender_id,
					receiver_id,
					message,
				)
			except asyncpg.UniqueViolationError as exc:
				raise InviteAlreadySent() from exc
			except asyncpg.ForeignKeyViolationError as exc:
				error = _FOREIGN_KEY_ERRORS.get(getattr(exc, "constraint_name", None))
				if error is None:
					raise
				raise error() from exc
		return Invitation.from_record(row)

	async def get(self, invitation_id: str) -> Optional[Invitation]:
		async with postgres.acquire() as conn:
			row = await conn.fetchrow(
				f"SELECT {_INVITE_COLUMNS} FROM invitations WHERE id = $1",
				invitation_id,
			)
		return Invitation.from_record(row) if row else None

	async def resolve(self, invitation_id: str, status: InvitationStatus) -> Optional[Resolution]:
		async with postgres.acquire() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					f"""
					UPDATE invitations
					SET status = $2, updated_at = NOW()
					WHERE id = $1 AND status = 'PENDING'
					RETURNING {_INVITE_COLUMNS}
					""",
					invitation_id,
					status.value,
				)
				if row is None:
					return None
				invitation = Invitation.from_record(row)
				if status is not InvitationStatus.ACCEPTED:
					return Resolution(invitation)
				match = await upsert_match(conn, PairKey.of(invitation.sender_id, invitation.receiver_id))
				return Resolution(invitation, match)

	async def list_for_user(self, user_id: str, box: InvitationBox) -> List[Invitation]:
		if box is InvitationBox.INBOX:
			where = "receiver_id = $1"
		elif box is InvitationBox.OUTBOX:
			where = "sender_id = $1"
		else:
			where = "sender_id = $1 OR receiver_id = $1"
		async with postgres.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_INVITE_COLUMNS}
				FROM invitations
				WHERE {where}
				ORDER BY created_at DESC, id DESC
				""",
				str(user_id),
			)
		return [Invitation.from_record(row) for row in rows]


class MemoryInvitationRepository:
	def __init__(self, db: MemoryDatabase | None = None) -> None:
		self._db = db or get_memory_db()

	async def create(self, sender_id: str, receiver_id: str, message: Optional[str]) -> Invitation:
		db = self._db
		async with db.lock:
			for row in db.invitations.values():
				if (
					row["sender_id"] == sender_id
					and row["receiver_id"] == receiver_id
					and row["status"] == InvitationStatus.PENDING.value
				):
					raise InviteAlreadySent()
			now = db.now()
			row = {
				"id": str(ulid.new()),
				"sender_id": sender_id,
				"receiver_id": receiver_id,
				"status": InvitationStatus.PENDING.value,
				"message": message,
				"created_at": now,
				"updated_at": now,
			}
			db.invitations[row["id"]] = row
			return Invitation.from_record(row)

	async def get(self, invitation_id: str) -> Optional[Invitation]:
		async with self._db.lock:
			row = self._db.invitations.get(invitation_id)
			return Invitation.from_record(row) if row else None

	async def resolve(self, invitation_id: str, status: InvitationStatus) -> Optional[Resolution]:
		db = self._db
		async with db.lock:
			row = db.invitations.get(invitation_id)
			if row is None or row["status"] != InvitationStatus.PENDING.value:
				return None
			row["status"] = status.value
			row["updated_at"] = db.now()
			invitation = Invitation.from_record(row)
			if status is not InvitationStatus.ACCEPTED:
				return Resolution(invitation)
			match = upsert_match_locked(db, PairKey.of(invitation.sender_id, invitation.receiver_id))
			return Resolution(invitation, match)

	async def list_for_user(self, user_id: str, box: InvitationBox) -> List[Invitation]:
		user_id = str(user_id)
		async with self._db.lock:
			rows = list(self._db.invitations.values())
		if box is InvitationBox.INBOX:
			rows = [row for row in rows if row["receiver_id"] == user_id]
		elif box is InvitationBox.OUTBOX:
			rows = [row for row in rows if row["sender_id"] == user_id]
		else:
			rows = [row for row in rows if user_id in (row["sender_id"], row["receiver_id"])]
		rows.sort(key=lambda row: (row["created_at"], row["id"]), reverse=True)
		return [Invitation.from_record(row) for row in rows]


def default_repository() -> InvitationRepository:
	if settings.uses_memory_store():
		return MemoryInvitationRepository()
	return PostgresInvitationRepository()
