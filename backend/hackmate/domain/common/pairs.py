"""Canonical ordering for two-person relationships."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from hackmate.domain.common.errors import InvalidRequest


def canonicalize(id_a: str, id_b: str) -> Tuple[str, str]:
	"""Return ``(low, high)`` for an unordered pair of identifiers.

	Ordering is lexicographic on the string form, so ``canonicalize(a, b)`` and
	``canonicalize(b, a)`` always agree.
	"""
	a, b = str(id_a), str(id_b)
	return (a, b) if a <= b else (b, a)


@dataclass(slots=True, frozen=True)
class PairKey:
	"""Storage identity of a match or conversation between two distinct users."""

	low: str
	high: str

	@classmethod
	def of(cls, id_a: str, id_b: str, *, reason: str = "self_pair") -> "PairKey":
		low, high = canonicalize(id_a, id_b)
		if low == high:
			raise InvalidRequest(reason)
		return cls(low=low, high=high)

	def participants(self) -> Tuple[str, str]:
		return (self.low, self.high)

	def includes(self, user_id: str) -> bool:
		return str(user_id) in (self.low, self.high)

	def other(self, user_id: str) -> str:
		user_id = str(user_id)
		if user_id == self.low:
			return self.high
		if user_id == self.high:
			return self.low
		raise ValueError(f"{user_id} is not part of this pair")
