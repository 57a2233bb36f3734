"""Domain models for pair conversations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from hackmate.domain.common.pairs import PairKey

CONTENT_MAX_LENGTH = 4000
NEW_CONVERSATION = "new"


@dataclass(slots=True)
class Conversation:
	"""The single thread between two matched users."""

	id: str
	user_low_id: str
	user_high_id: str
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_record(cls, record) -> "Conversation":
		return cls(
			id=str(record["id"]),
			user_low_id=str(record["user_low_id"]),
			user_high_id=str(record["user_high_id"]),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
		)

	@property
	def pair(self) -> PairKey:
		return PairKey(low=self.user_low_id, high=self.user_high_id)

	def is_participant(self, user_id: str) -> bool:
		return self.pair.includes(user_id)


@dataclass(slots=True)
class ChatMessage:
	id: str
	conversation_id: str
	seq: int
	sender_id: str
	content: str
	read: bool
	created_at: datetime

	@classmethod
	def from_record(cls, record) -> "ChatMessage":
		return cls(
			id=str(record["id"]),
			conversation_id=str(record["conversation_id"]),
			seq=int(record["seq"]),
			sender_id=str(record["sender_id"]),
			content=record["content"],
			read=bool(record["read"]),
			created_at=record["created_at"],
		)


@dataclass(slots=True)
class ConversationSummary:
	conversation: Conversation
	last_message: Optional[ChatMessage]
	unread_count: int
