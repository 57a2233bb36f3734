"""REST API surface for confirmed matches."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from hackmate.domain.matches import service
from hackmate.domain.matches.schemas import MatchView
from hackmate.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/matches", tags=["matches"])


@router.get("", response_model=List[MatchView])
async def list_matches(auth_user: AuthenticatedUser = Depends(get_current_user)) -> List[MatchView]:
	return await service.list_matches(auth_user.id)
