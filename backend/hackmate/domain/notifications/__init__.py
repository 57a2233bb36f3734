"""Notification dispatch exports."""

from .dispatcher import NotificationDispatcher, get_dispatcher, notify, set_dispatcher
from .templates import INVITATION_ACCEPTED, INVITATION_RECEIVED

__all__ = [
	"INVITATION_ACCEPTED",
	"INVITATION_RECEIVED",
	"NotificationDispatcher",
	"get_dispatcher",
	"notify",
	"set_dispatcher",
]
