"""Conversation and message storage.

Conversations use the same create-if-absent discipline as matches: unique
``(user_low_id, user_high_id)`` plus ``ON CONFLICT DO NOTHING``. Messages are
append-only and ordered by ``seq``. A send upserts the conversation, inserts
the message and bumps ``updated_at`` as one unit: either all of it commits or
none does.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

import asyncpg
import ulid

from hackmate.domain.common.pairs import PairKey
from hackmate.domain.common.upsert import AlreadyExisted, Created, Upserted
from hackmate.infra import postgres
from hackmate.infra.memory import MemoryDatabase, get_memory_db
from hackmate.settings import settings

from .models import ChatMessage, Conversation, ConversationSummary

_CONVERSATION_COLUMNS = "id, user_low_id, user_high_id, created_at, updated_at"
_MESSAGE_COLUMNS = "id, conversation_id, seq, sender_id, content, read, created_at"


class ChatRepository(Protocol):
	async def find_conversation(self, pair: PairKey) -> Optional[Conversation]: ...

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]: ...

	async def append_to_pair(
		self, pair: PairKey, sender_id: str, content: str
	) -> Tuple[Upserted[Conversation], ChatMessage]: ...

	async def list_messages(self, conversation_id: str) -> List[ChatMessage]: ...

	async def mark_read(self, conversation_id: str, viewer_id: str) -> int: ...

	async def list_conversations(self, user_id: str) -> List[ConversationSummary]: ...


def _parse_command_count(status: str) -> int:
	# asyncpg returns e.g. "UPDATE 3"
	try:
		return int(status.rsplit(" ", 1)[-1])
	except (AttributeError, ValueError):
		return 0


class PostgresChatRepository:
	async def _select_by_pair(self, conn: asyncpg.Connection, pair: PairKey):
		return await conn.fetchrow(
			f"""
			SELECT {_CONVERSATION_COLUMNS}
			FROM conversations
			WHERE user_low_id = $1 AND user_high_id = $2
			""",
			pair.low,
			pair.high,
		)

	async def find_conversation(self, pair: PairKey) -> Optional[Conversation]:
		async with postgres.acquire() as conn:
			row = await self._select_by_pair(conn, pair)
		return Conversation.from_record(row) if row else None

	async def _upsert_conversation(self, conn: asyncpg.Connection, pair: PairKey) -> Upserted[Conversation]:
		row = await conn.fetchrow(
			f"""
			INSERT INTO conversations (id, user_low_id, user_high_id)
			VALUES ($1, $2, $3)
			ON CONFLICT (user_low_id, user_high_id) DO NOTHING
			RETURNING {_CONVERSATION_COLUMNS}
			""",
			str(ulid.new()),
			pair.low,
			pair.high,
		)
		if row is not None:
			return Created(Conversation.from_record(row))
		existing = await self._select_by_pair(conn, pair)
		return AlreadyExisted(Conversation.from_record(existing))

	async def append_to_pair(
		self,
		pair: PairKey,
		sender_id: str,
		content: str,
	) -> Tuple[Upserted[Conversation], ChatMessage]:
		async with postgres.acquire() as conn:
			async with conn.transaction():
				upserted = await self._upsert_conversation(conn, pair)
				row = await conn.fetchrow(
					f"""
					INSERT INTO messages (id, conversation_id, sender_id, content)
					VALUES ($1, $2, $3, $4)
					RETURNING {_MESSAGE_COLUMNS}
					""",
					str(ulid.new()),
					upserted.row.id,
					sender_id,
					content,
				)
				await conn.execute(
					"UPDATE conversations SET updated_at = GREATEST(updated_at, $2) WHERE id = $1",
					upserted.row.id,
					row["created_at"],
				)
		return upserted, ChatMessage.from_record(row)

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		async with postgres.acquire() as conn:
			row = await conn.fetchrow(
				f"SELECT {_CONVERSATION_COLUMNS} FROM conversations WHERE id = $1",
				conversation_id,
			)
		return Conversation.from_record(row) if row else None

	async def list_messages(self, conversation_id: str) -> List[ChatMessage]:
		async with postgres.acquire() as conn:
			rows = await conn.fetch(
				f"""
				SELECT {_MESSAGE_COLUMNS}
				FROM messages
				WHERE conversation_id = $1
				ORDER BY seq ASC
				""",
				conversation_id,
			)
		return [ChatMessage.from_record(row) for row in rows]

	async def mark_read(self, conversation_id: str, viewer_id: str) -> int:
		async with postgres.acquire() as conn:
			status = await conn.execute(
				"""
				UPDATE messages
				SET read = TRUE
				WHERE conversation_id = $1 AND sender_id <> $2 AND read = FALSE
				""",
				conversation_id,
				viewer_id,
			)
		return _parse_command_count(status)

	async def list_conversations(self, user_id: str) -> List[ConversationSummary]:
		async with postgres.acquire() as conn:
			rows = await conn.fetch(
				"""
				SELECT c.id, c.user_low_id, c.user_high_id, c.created_at, c.updated_at,
					last.id AS last_id, last.seq AS last_seq, last.sender_id AS last_sender_id,
					last.content AS last_content, last.read AS last_read, last.created_at AS last_created_at,
					(
						SELECT COUNT(*)
						FROM messages unread
						WHERE unread.conversation_id = c.id
							AND unread.sender_id <> $1
							AND unread.read = FALSE
					) AS unread_count
				FROM conversations c
				LEFT JOIN LATERAL (
					SELECT m.id, m.seq, m.sender_id, m.content, m.read, m.created_at
					FROM messages m
					WHERE m.conversation_id = c.id
					ORDER BY m.seq DESC
					LIMIT 1
				) last ON TRUE
				WHERE c.user_low_id = $1 OR c.user_high_id = $1
				ORDER BY c.updated_at DESC, c.id DESC
				""",
				str(user_id),
			)
		summaries: List[ConversationSummary] = []
		for row in rows:
			last_message = None
			if row["last_id"] is not None:
				last_message = ChatMessage(
					id=str(row["last_id"]),
					conversation_id=str(row["id"]),
					seq=int(row["last_seq"]),
					sender_id=str(row["last_sender_id"]),
					content=row["last_content"],
					read=bool(row["last_read"]),
					created_at=row["last_created_at"],
				)
			summaries.append(
				ConversationSummary(
					conversation=Conversation.from_record(row),
					last_message=last_message,
					unread_count=int(row["unread_count"] or 0),
				)
			)
		return summaries


class MemoryChatRepository:
	def __init__(self, db: MemoryDatabase | None = None) -> None:
		self._db = db or get_memory_db()

	async def find_conversation(self, pair: PairKey) -> Optional[Conversation]:
		async with self._db.lock:
			row = self._db.conversations.get(pair.participants())
			return Conversation.from_record(row) if row else None

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		async with self._db.lock:
			row = self._db.conversation_by_id(conversation_id)
			return Conversation.from_record(row) if row else None

	def _message_row(self, conversation_id: str, sender_id: str, content: str) -> dict:
		db = self._db
		return {
			"id": str(ulid.new()),
			"conversation_id": conversation_id,
			"seq": db.next_seq(),
			"sender_id": sender_id,
			"content": content,
			"read": False,
			"created_at": db.now(),
		}

	async def append_to_pair(
		self,
		pair: PairKey,
		sender_id: str,
		content: str,
	) -> Tuple[Upserted[Conversation], ChatMessage]:
		db = self._db
		key = pair.participants()
		async with db.lock:
			existing = db.conversations.get(key)
			if existing is None:
				now = db.now()
				conversation_row = {
					"id": str(ulid.new()),
					"user_low_id": pair.low,
					"user_high_id": pair.high,
					"created_at": now,
					"updated_at": now,
				}
			else:
				conversation_row = existing
			# nothing is stored until both rows are built
			message_row = self._message_row(conversation_row["id"], sender_id, content)
			if existing is None:
				db.conversations[key] = conversation_row
			db.messages.setdefault(conversation_row["id"], []).append(message_row)
			conversation_row["updated_at"] = max(conversation_row["updated_at"], message_row["created_at"])
			conversation = Conversation.from_record(conversation_row)
			message = ChatMessage.from_record(message_row)
		upserted = AlreadyExisted(conversation) if existing is not None else Created(conversation)
		return upserted, message

	async def list_messages(self, conversation_id: str) -> List[ChatMessage]:
		async with self._db.lock:
			rows = list(self._db.messages.get(conversation_id, []))
		return [ChatMessage.from_record(row) for row in rows]

	async def mark_read(self, conversation_id: str, viewer_id: str) -> int:
		marked = 0
		async with self._db.lock:
			for row in self._db.messages.get(conversation_id, []):
				if row["sender_id"] != viewer_id and not row["read"]:
					row["read"] = True
					marked += 1
		return marked

	async def list_conversations(self, user_id: str) -> List[ConversationSummary]:
		user_id = str(user_id)
		summaries: List[ConversationSummary] = []
		async with self._db.lock:
			for key, row in self._db.conversations.items():
				if user_id not in key:
					continue
				messages = self._db.messages.get(row["id"], [])
				unread = sum(1 for m in messages if m["sender_id"] != user_id and not m["read"])
				summaries.append(
					ConversationSummary(
						conversation=Conversation.from_record(row),
						last_message=ChatMessage.from_record(messages[-1]) if messages else None,
						unread_count=unread,
					)
				)
		summaries.sort(key=lambda s: (s.conversation.updated_at, s.conversation.id), reverse=True)
		return summaries


def default_repository() -> ChatRepository:
	if settings.uses_memory_store():
		return MemoryChatRepository()
	return PostgresChatRepository()
