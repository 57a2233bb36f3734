"""Read-only user projections consumed by the relationship domains."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(slots=True)
class UserProfile:
	id: str
	username: str
	display_name: Optional[str] = None
	avatar_url: Optional[str] = None
	bio: Optional[str] = None
	skills: Tuple[str, ...] = field(default_factory=tuple)
	email: Optional[str] = None

	@classmethod
	def from_record(cls, record) -> "UserProfile":
		skills = record.get("skills") or ()
		return cls(
			id=str(record["id"]),
			username=str(record.get("username") or record["id"]),
			display_name=record.get("display_name"),
			avatar_url=record.get("avatar_url"),
			bio=record.get("bio"),
			skills=tuple(str(skill) for skill in skills),
			email=record.get("email"),
		)

	@property
	def name(self) -> str:
		return self.display_name or self.username
