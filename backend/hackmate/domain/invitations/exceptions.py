"""Domain-level exceptions for collaboration invitations."""

from __future__ import annotations

from hackmate.domain.common.errors import Conflict, Forbidden, InvalidRequest, InvalidState, NotFound


class InviteAlreadySent(Conflict):
    reason = "already_sent"


class InviteSelfError(InvalidRequest):
    reason = "self_invite"


class InviteUnknownReceiver(InvalidRequest):
    reason = "unknown_receiver"


class InviteUnknownSender(InvalidRequest):
    reason = "unknown_sender"


class InviteMessageTooLong(InvalidRequest):
    reason = "message_too_long"


class InviteNotFound(NotFound):
    reason = "invitation_not_found"


class InviteForbidden(Forbidden):
    reason = "not_recipient"


class InviteAlreadyProcessed(InvalidState):
    reason = "already_processed"
