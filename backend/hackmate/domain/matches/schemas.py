"""Pydantic schemas for match listings."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from hackmate.domain.users.schemas import MatchedUser


class MatchView(BaseModel):
	id: str
	user: MatchedUser
	created_at: datetime
