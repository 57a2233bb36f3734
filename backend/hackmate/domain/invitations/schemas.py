"""Pydantic schemas for invitations."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from hackmate.domain.users.schemas import UserSummary

from .models import Invitation


class InvitationCreateRequest(BaseModel):
	receiver_id: str = Field(..., min_length=1, description="User being invited")
	message: Optional[str] = Field(default=None, description="Trimmed and length-checked by the invitation service")


class InvitationRespondRequest(BaseModel):
	status: Literal["ACCEPTED", "REJECTED"]


class InvitationView(BaseModel):
	id: str
	sender_id: str
	receiver_id: str
	status: Literal["PENDING", "ACCEPTED", "REJECTED"]
	message: Optional[str] = None
	created_at: datetime
	updated_at: datetime
	sender: UserSummary
	receiver: UserSummary

	@classmethod
	def build(cls, invitation: Invitation, *, sender: UserSummary, receiver: UserSummary) -> "InvitationView":
		return cls(
			id=invitation.id,
			sender_id=invitation.sender_id,
			receiver_id=invitation.receiver_id,
			status=invitation.status.value,
			message=invitation.message,
			created_at=invitation.created_at,
			updated_at=invitation.updated_at,
			sender=sender,
			receiver=receiver,
		)
