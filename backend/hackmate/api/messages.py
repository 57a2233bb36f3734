"""REST API surface for messaging between matched users.

``POST /messages/new`` starts (or reuses) the pair's conversation; posting to
an existing id must name the conversation that belongs to the recipient pair.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from hackmate.api.quotas import message_quota
from hackmate.domain.chat import service
from hackmate.domain.chat.schemas import (
	ConversationListItem,
	MarkReadResponse,
	MessageListResponse,
	SendMessageRequest,
	SendMessageResponse,
)
from hackmate.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=List[ConversationListItem])
async def list_conversations(
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[ConversationListItem]:
	return await service.list_conversations(auth_user.id)


@router.get("/{conversation_id}", response_model=MessageListResponse)
async def list_messages(
	conversation_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MessageListResponse:
	return await service.list_messages(conversation_id, auth_user.id)


@router.post("/{conversation_id}", response_model=SendMessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
	conversation_id: str,
	payload: SendMessageRequest,
	auth_user: AuthenticatedUser = Depends(message_quota),
) -> SendMessageResponse:
	return await service.send_message(auth_user.id, payload.recipient_id, payload.content, conversation_id)


@router.patch("/{conversation_id}", response_model=MarkReadResponse)
async def mark_read(
	conversation_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> MarkReadResponse:
	return await service.mark_read(conversation_id, auth_user.id)
