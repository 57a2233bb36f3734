"""Email templates for relationship notifications."""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Any, Callable, Dict, Mapping

from hackmate.settings import settings

INVITATION_RECEIVED = "invitation_received"
INVITATION_ACCEPTED = "invitation_accepted"


class UnknownTemplate(LookupError):
	pass


@dataclass(slots=True)
class RenderedEmail:
	subject: str
	html: str


def _link(path: str) -> str:
	return f"{settings.app_url.rstrip('/')}{path}"


def _invitation_received(recipient_name: str, data: Mapping[str, Any]) -> RenderedEmail:
	sender = escape(str(data.get("sender_name") or "Someone"))
	message = data.get("message")
	quoted = f"<blockquote>{escape(str(message))}</blockquote>" if message else ""
	return RenderedEmail(
		subject=f"{data.get('sender_name') or 'Someone'} wants to team up on HackMate",
		html=f"""
		<html>
			<body>
				<p>Hi {escape(recipient_name)},</p>
				<p><strong>{sender}</strong> sent you a collaboration invitation.</p>
				{quoted}
				<p><a href="{_link('/connections')}">Review the invitation</a></p>
			</body>
		</html>
		""",
	)


def _invitation_accepted(recipient_name: str, data: Mapping[str, Any]) -> RenderedEmail:
	receiver = escape(str(data.get("receiver_name") or "Your teammate"))
	return RenderedEmail(
		subject="Your HackMate invitation was accepted",
		html=f"""
		<html>
			<body>
				<p>Hi {escape(recipient_name)},</p>
				<p><strong>{receiver}</strong> accepted your invitation. You can now message each other.</p>
				<p><a href="{_link('/connections')}">Start the conversation</a></p>
			</body>
		</html>
		""",
	)


_TEMPLATES: Dict[str, Callable[[str, Mapping[str, Any]], RenderedEmail]] = {
	INVITATION_RECEIVED: _invitation_received,
	INVITATION_ACCEPTED: _invitation_accepted,
}


def render(kind: str, recipient_name: str, data: Mapping[str, Any]) -> RenderedEmail:
	try:
		template = _TEMPLATES[kind]
	except KeyError:
		raise UnknownTemplate(kind) from None
	return template(recipient_name, data)
