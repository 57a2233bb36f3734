"""Chat domain exports."""

from .service import ChatService, list_conversations, list_messages, mark_read, send_message

__all__ = [
	"ChatService",
	"list_conversations",
	"list_messages",
	"mark_read",
	"send_message",
]
