"""Messaging between matched users."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from hackmate.domain.common.pairs import PairKey
from hackmate.domain.matches.service import MatchService
from hackmate.domain.matches.service import get_service as get_match_service
from hackmate.domain.users.repo import UserDirectory, get_directory
from hackmate.domain.users.schemas import UserSummary
from hackmate.obs import metrics as obs_metrics

from .exceptions import (
	CannotMessageSelf,
	ConversationMismatch,
	ConversationNotFound,
	EmptyMessage,
	MessageTooLong,
	NotMatched,
	NotParticipant,
)
from .models import CONTENT_MAX_LENGTH, NEW_CONVERSATION, ChatMessage, Conversation
from .repo import ChatRepository, default_repository
from .schemas import (
	ConversationListItem,
	MarkReadResponse,
	MessageListResponse,
	MessageResponse,
	SendMessageResponse,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SentMessage:
	message: ChatMessage
	conversation_id: str
	conversation_created: bool


def _normalise_content(content: str) -> str:
	text = (content or "").strip()
	if not text:
		raise EmptyMessage()
	if len(text) > CONTENT_MAX_LENGTH:
		raise MessageTooLong()
	return text


class ChatService:
	def __init__(
		self,
		repository: ChatRepository | None = None,
		match_service: MatchService | None = None,
		users: UserDirectory | None = None,
	) -> None:
		self._repo = repository or default_repository()
		self._matches = match_service
		self._users = users

	@property
	def match_service(self) -> MatchService:
		return self._matches or get_match_service()

	@property
	def users(self) -> UserDirectory:
		return self._users or get_directory()

	async def _load_for_participant(self, conversation_id: str, viewer_id: str) -> Conversation:
		conversation = await self._repo.get_conversation(conversation_id)
		if conversation is None:
			raise ConversationNotFound()
		if not conversation.is_participant(viewer_id):
			raise NotParticipant()
		return conversation

	async def send_message(
		self,
		sender_id: str,
		recipient_id: str,
		content: str,
		conversation_id: Optional[str] = None,
	) -> SentMessage:
		sender_id, recipient_id = str(sender_id), str(recipient_id).strip()
		if sender_id == recipient_id:
			obs_metrics.inc_chat_send_reject(CannotMessageSelf.reason)
			raise CannotMessageSelf()
		try:
			text = _normalise_content(content)
		except (EmptyMessage, MessageTooLong) as exc:
			obs_metrics.inc_chat_send_reject(exc.reason)
			raise
		pair = PairKey.of(sender_id, recipient_id)

		if not await self.match_service.exists(sender_id, recipient_id):
			obs_metrics.inc_chat_send_reject(NotMatched.reason)
			raise NotMatched()

		if conversation_id and conversation_id != NEW_CONVERSATION:
			existing = await self._repo.find_conversation(pair)
			if existing is None or existing.id != conversation_id:
				obs_metrics.inc_chat_send_reject(ConversationMismatch.reason)
				raise ConversationMismatch()

		upserted, message = await self._repo.append_to_pair(pair, sender_id, text)
		obs_metrics.inc_conversation_upsert(upserted.created)
		conversation = upserted.row
		obs_metrics.inc_chat_send()
		logger.info(
			"chat_message_sent",
			extra={
				"conversation_id": conversation.id,
				"message_id": message.id,
				"conversation_created": upserted.created,
			},
		)
		return SentMessage(message=message, conversation_id=conversation.id, conversation_created=upserted.created)

	async def list_messages(self, conversation_id: str, viewer_id: str) -> List[ChatMessage]:
		conversation = await self._load_for_participant(conversation_id, str(viewer_id))
		return await self._repo.list_messages(conversation.id)

	async def mark_read(self, conversation_id: str, viewer_id: str) -> int:
		conversation = await self._load_for_participant(conversation_id, str(viewer_id))
		marked = await self._repo.mark_read(conversation.id, str(viewer_id))
		obs_metrics.inc_chat_read(marked)
		return marked

	async def list_conversations(self, user_id: str) -> List[ConversationListItem]:
		user_id = str(user_id)
		summaries = await self._repo.list_conversations(user_id)
		profiles = await self.users.get_many(s.conversation.pair.other(user_id) for s in summaries)
		items: List[ConversationListItem] = []
		for summary in summaries:
			conversation = summary.conversation
			other_id = conversation.pair.other(user_id)
			profile = profiles.get(other_id)
			items.append(
				ConversationListItem(
					id=conversation.id,
					other_user=UserSummary.from_profile(profile) if profile else UserSummary.placeholder(other_id),
					last_message=MessageResponse.from_model(summary.last_message) if summary.last_message else None,
					unread_count=summary.unread_count,
					created_at=conversation.created_at,
					updated_at=conversation.updated_at,
				)
			)
		return items


_SERVICE: ChatService | None = None


def get_service() -> ChatService:
	global _SERVICE
	if _SERVICE is None:
		_SERVICE = ChatService()
	return _SERVICE


def set_service(service: ChatService | None) -> None:
	global _SERVICE
	_SERVICE = service


async def send_message(
	sender_id: str,
	recipient_id: str,
	content: str,
	conversation_id: Optional[str] = None,
) -> SendMessageResponse:
	sent = await get_service().send_message(sender_id, recipient_id, content, conversation_id)
	return SendMessageResponse(message=MessageResponse.from_model(sent.message), conversation_id=sent.conversation_id)


async def list_messages(conversation_id: str, viewer_id: str) -> MessageListResponse:
	items = await get_service().list_messages(conversation_id, viewer_id)
	return MessageListResponse(conversation_id=conversation_id, items=[MessageResponse.from_model(m) for m in items])


async def mark_read(conversation_id: str, viewer_id: str) -> MarkReadResponse:
	marked = await get_service().mark_read(conversation_id, viewer_id)
	return MarkReadResponse(success=True, marked=marked)


async def list_conversations(user_id: str) -> List[ConversationListItem]:
	return await get_service().list_conversations(user_id)
