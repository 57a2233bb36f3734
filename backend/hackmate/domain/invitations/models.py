"""Domain models for collaboration invitations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class InvitationStatus(str, Enum):
	"""Lifecycle states; ACCEPTED and REJECTED are terminal."""

	PENDING = "PENDING"
	ACCEPTED = "ACCEPTED"
	REJECTED = "REJECTED"


class InvitationBox(str, Enum):
	ALL = "all"
	INBOX = "inbox"
	OUTBOX = "outbox"


MESSAGE_MAX_LENGTH = 500


@dataclass(slots=True)
class Invitation:
	id: str
	sender_id: str
	receiver_id: str
	status: InvitationStatus
	message: Optional[str]
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_record(cls, record) -> "Invitation":
		return cls(
			id=str(record["id"]),
			sender_id=str(record["sender_id"]),
			receiver_id=str(record["receiver_id"]),
			status=InvitationStatus(record["status"]),
			message=record.get("message"),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
		)

	@property
	def is_pending(self) -> bool:
		return self.status is InvitationStatus.PENDING

	def involves(self, user_id: str) -> bool:
		return str(user_id) in (self.sender_id, self.receiver_id)
