"""Pydantic schemas for the messaging API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from hackmate.domain.users.schemas import UserSummary

from .models import ChatMessage


class SendMessageRequest(BaseModel):
	recipient_id: str = Field(..., min_length=1, description="Matched user receiving the message")
	content: str = Field(..., description="Trimmed and length-checked by the chat service")


class MessageResponse(BaseModel):
	id: str
	conversation_id: str
	sender_id: str
	content: str
	read: bool
	created_at: datetime

	@classmethod
	def from_model(cls, message: ChatMessage) -> "MessageResponse":
		return cls(
			id=message.id,
			conversation_id=message.conversation_id,
			sender_id=message.sender_id,
			content=message.content,
			read=message.read,
			created_at=message.created_at,
		)


class SendMessageResponse(BaseModel):
	message: MessageResponse
	conversation_id: str


class ConversationListItem(BaseModel):
	id: str
	other_user: UserSummary
	last_message: Optional[MessageResponse] = None
	unread_count: int = 0
	created_at: datetime
	updated_at: datetime


class MessageListResponse(BaseModel):
	conversation_id: str
	items: List[MessageResponse]


class MarkReadResponse(BaseModel):
	success: bool = True
	marked: int = 0
