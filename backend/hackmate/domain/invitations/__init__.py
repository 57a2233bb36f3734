"""Invitation ledger exports."""

from .models import MESSAGE_MAX_LENGTH, Invitation, InvitationBox, InvitationStatus  # noqa: F401
from .schemas import InvitationCreateRequest, InvitationRespondRequest, InvitationView  # noqa: F401
from .service import (  # noqa: F401
	InvitationService,
	list_invitations,
	respond_to_invitation,
	send_invitation,
)
