"""Tagged results for create-if-absent writes.

A racing insert that loses to a uniqueness constraint is not a failure: it
returns ``AlreadyExisted`` with the winning row.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Created(Generic[T]):
	row: T

	@property
	def created(self) -> bool:
		return True


@dataclass(frozen=True)
class AlreadyExisted(Generic[T]):
	row: T

	@property
	def created(self) -> bool:
		return False


Upserted = Union[Created[T], AlreadyExisted[T]]
