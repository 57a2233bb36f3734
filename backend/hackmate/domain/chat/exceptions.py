"""Domain-level exceptions for matched-pair messaging."""

from __future__ import annotations

from hackmate.domain.common.errors import Forbidden, InvalidRequest, NotFound


class CannotMessageSelf(InvalidRequest):
    reason = "cannot_message_self"


class EmptyMessage(InvalidRequest):
    reason = "empty_message"


class MessageTooLong(InvalidRequest):
    reason = "message_too_long"


class ConversationMismatch(InvalidRequest):
    reason = "conversation_mismatch"


class NotMatched(Forbidden):
    reason = "not_matched"


class NotParticipant(Forbidden):
    reason = "not_participant"


class ConversationNotFound(NotFound):
    reason = "conversation_not_found"
