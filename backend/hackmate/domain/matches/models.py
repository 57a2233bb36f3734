"""Domain models for confirmed matches."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from hackmate.domain.common.pairs import PairKey


@dataclass(slots=True)
class Match:
	id: str
	user_low_id: str
	user_high_id: str
	created_at: datetime

	@classmethod
	def from_record(cls, record) -> "Match":
		return cls(
			id=str(record["id"]),
			user_low_id=str(record["user_low_id"]),
			user_high_id=str(record["user_high_id"]),
			created_at=record["created_at"],
		)

	@property
	def pair(self) -> PairKey:
		return PairKey(low=self.user_low_id, high=self.user_high_id)

	def other(self, user_id: str) -> str:
		return self.pair.other(user_id)
