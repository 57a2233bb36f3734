"""Pydantic projections of users embedded in invitation, match and chat payloads."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .models import UserProfile


class UserSummary(BaseModel):
	id: str
	username: str
	display_name: Optional[str] = None
	avatar_url: Optional[str] = None

	@classmethod
	def from_profile(cls, profile: UserProfile) -> "UserSummary":
		return cls(
			id=profile.id,
			username=profile.username,
			display_name=profile.display_name,
			avatar_url=profile.avatar_url,
		)

	@classmethod
	def placeholder(cls, user_id: str) -> "UserSummary":
		return cls(id=user_id, username=user_id)


class MatchedUser(UserSummary):
	bio: Optional[str] = None
	skills: List[str] = Field(default_factory=list)

	@classmethod
	def from_profile(cls, profile: UserProfile) -> "MatchedUser":
		return cls(
			id=profile.id,
			username=profile.username,
			display_name=profile.display_name,
			avatar_url=profile.avatar_url,
			bio=profile.bio,
			skills=list(profile.skills),
		)
