"""REST API surface for collaboration invitations."""

from __future__ import annotations

from typing import List, Literal

from fastapi import APIRouter, Depends, Query, status

from hackmate.api.quotas import invite_quota
from hackmate.domain.invitations import service
from hackmate.domain.invitations.schemas import (
	InvitationCreateRequest,
	InvitationRespondRequest,
	InvitationView,
)
from hackmate.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get("", response_model=List[InvitationView])
async def list_invitations(
	box: Literal["all", "inbox", "outbox"] = Query(default="all"),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> List[InvitationView]:
	return await service.list_invitations(auth_user.id, box)


@router.post("", response_model=InvitationView, status_code=status.HTTP_201_CREATED)
async def create_invitation(
	payload: InvitationCreateRequest,
	auth_user: AuthenticatedUser = Depends(invite_quota),
) -> InvitationView:
	return await service.send_invitation(auth_user.id, payload.receiver_id, payload.message)


@router.patch("/{invitation_id}", response_model=InvitationView)
async def respond_to_invitation(
	invitation_id: str,
	payload: InvitationRespondRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> InvitationView:
	return await service.respond_to_invitation(invitation_id, auth_user.id, payload.status)
