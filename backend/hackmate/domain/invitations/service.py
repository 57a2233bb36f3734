"""Invitation ledger: one-directional collaboration requests and their resolution."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from hackmate.domain import notifications
from hackmate.domain.common.errors import InvalidRequest
from hackmate.domain.notifications import NotificationDispatcher
from hackmate.domain.users.models import UserProfile
from hackmate.domain.users.repo import UserDirectory, get_directory
from hackmate.domain.users.schemas import UserSummary
from hackmate.obs import metrics as obs_metrics

from .exceptions import (
	InviteAlreadyProcessed,
	InviteAlreadySent,
	InviteForbidden,
	InviteMessageTooLong,
	InviteNotFound,
	InviteSelfError,
	InviteUnknownReceiver,
)
from .models import MESSAGE_MAX_LENGTH, Invitation, InvitationBox, InvitationStatus
from .repo import InvitationRepository, default_repository
from .schemas import InvitationView

logger = logging.getLogger(__name__)


def _normalise_message(message: Optional[str]) -> Optional[str]:
	if message is None:
		return None
	text = message.strip()
	if not text:
		return None
	if len(text) > MESSAGE_MAX_LENGTH:
		raise InviteMessageTooLong()
	return text


def _parse_decision(decision: InvitationStatus | str) -> InvitationStatus:
	try:
		status = InvitationStatus(decision)
	except ValueError:
		raise InvalidRequest("invalid_decision") from None
	if status is InvitationStatus.PENDING:
		raise InvalidRequest("invalid_decision")
	return status


def _summary(profiles: Dict[str, UserProfile], user_id: str) -> UserSummary:
	profile = profiles.get(user_id)
	return UserSummary.from_profile(profile) if profile else UserSummary.placeholder(user_id)


class InvitationService:
	def __init__(
		self,
		repository: InvitationRepository | None = None,
		users: UserDirectory | None = None,
		notifier: NotificationDispatcher | None = None,
	) -> None:
		self._repo = repository or default_repository()
		self._users = users
		self._notifier = notifier

	@property
	def users(self) -> UserDirectory:
		return self._users or get_directory()

	@property
	def notifier(self) -> NotificationDispatcher:
		return self._notifier or notifications.get_dispatcher()

	async def _views(self, invitations: Iterable[Invitation]) -> List[InvitationView]:
		invitations = list(invitations)
		ids = {user_id for invite in invitations for user_id in (invite.sender_id, invite.receiver_id)}
		profiles = await self.users.get_many(ids)
		return [
			InvitationView.build(
				invite,
				sender=_summary(profiles, invite.sender_id),
				receiver=_summary(profiles, invite.receiver_id),
			)
			for invite in invitations
		]

	async def list_invitations(
		self,
		user_id: str,
		box: InvitationBox | str = InvitationBox.ALL,
	) -> List[InvitationView]:
		invitations = await self._repo.list_for_user(str(user_id), InvitationBox(box))
		return await self._views(invitations)

	async def send(self, sender_id: str, receiver_id: str, message: Optional[str] = None) -> InvitationView:
		sender_id, receiver_id = str(sender_id), str(receiver_id).strip()
		if sender_id == receiver_id:
			obs_metrics.inc_invite_send_reject(InviteSelfError.reason)
			raise InviteSelfError()
		text = _normalise_message(message)
		if not await self.users.exists(receiver_id):
			obs_metrics.inc_invite_send_reject(InviteUnknownReceiver.reason)
			raise InviteUnknownReceiver()
		try:
			invitation = await self._repo.create(sender_id, receiver_id, text)
		except InviteAlreadySent:
			obs_metrics.inc_invite_send_reject(InviteAlreadySent.reason)
			raise

		obs_metrics.inc_invite_sent()
		logger.info(
			"invitation_sent",
			extra={"invitation_id": invitation.id, "sender_id": sender_id, "receiver_id": receiver_id},
		)
		(view,) = await self._views([invitation])
		self.notifier.notify(
			receiver_id,
			notifications.INVITATION_RECEIVED,
			{
				"invitation_id": invitation.id,
				"sender_name": view.sender.display_name or view.sender.username,
				"message": invitation.message,
			},
		)
		return view

	async def respond(
		self,
		invitation_id: str,
		responder_id: str,
		decision: InvitationStatus | str,
	) -> InvitationView:
		status = _parse_decision(decision)
		invitation = await self._repo.get(invitation_id)
		if invitation is None:
			raise InviteNotFound()
		if invitation.receiver_id != str(responder_id):
			raise InviteForbidden()
		if not invitation.is_pending:
			raise InviteAlreadyProcessed()

		resolution = await self._repo.resolve(invitation_id, status)
		if resolution is None:
			# Another request resolved it between the read and the conditional update
			raise InviteAlreadyProcessed()

		resolved = resolution.invitation
		obs_metrics.inc_invite_responded(status.value)
		if resolution.match is not None:
			obs_metrics.inc_match_upsert(resolution.match.created)
		logger.info(
			"invitation_resolved",
			extra={
				"invitation_id": resolved.id,
				"status": status.value,
				"match_id": resolution.match.row.id if resolution.match else None,
			},
		)
		(view,) = await self._views([resolved])
		if status is InvitationStatus.ACCEPTED:
			self.notifier.notify(
				resolved.sender_id,
				notifications.INVITATION_ACCEPTED,
				{
					"invitation_id": resolved.id,
					"receiver_name": view.receiver.display_name or view.receiver.username,
				},
			)
		return view


_SERVICE: InvitationService | None = None


def get_service() -> InvitationService:
	global _SERVICE
	if _SERVICE is None:
		_SERVICE = InvitationService()
	return _SERVICE


def set_service(service: InvitationService | None) -> None:
	global _SERVICE
	_SERVICE = service


async def list_invitations(user_id: str, box: InvitationBox | str = InvitationBox.ALL) -> List[InvitationView]:
	return await get_service().list_invitations(user_id, box)


async def send_invitation(sender_id: str, receiver_id: str, message: Optional[str] = None) -> InvitationView:
	return await get_service().send(sender_id, receiver_id, message)


async def respond_to_invitation(
	invitation_id: str,
	responder_id: str,
	decision: InvitationStatus | str,
) -> InvitationView:
	return await get_service().respond(invitation_id, responder_id, decision)
