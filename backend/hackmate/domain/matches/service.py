"""Match registry: confirmed, symmetric collaboration relationships."""

from __future__ import annotations

import logging
from typing import List

from hackmate.domain.common.pairs import PairKey
from hackmate.domain.common.upsert import Upserted
from hackmate.domain.users.repo import UserDirectory, get_directory
from hackmate.domain.users.schemas import MatchedUser
from hackmate.obs import metrics as obs_metrics

from .models import Match
from .repo import MatchRepository, default_repository
from .schemas import MatchView

logger = logging.getLogger(__name__)


class MatchService:
	def __init__(
		self,
		repository: MatchRepository | None = None,
		users: UserDirectory | None = None,
	) -> None:
		self._repo = repository or default_repository()
		self._users = users

	@property
	def users(self) -> UserDirectory:
		return self._users or get_directory()

	async def get_or_create(self, user_a: str, user_b: str) -> Upserted[Match]:
		pair = PairKey.of(user_a, user_b)
		result = await self._repo.get_or_create(pair)
		obs_metrics.inc_match_upsert(result.created)
		if result.created:
			logger.info("match_created", extra={"match_id": result.row.id})
		return result

	async def exists(self, user_a: str, user_b: str) -> bool:
		pair = PairKey.of(user_a, user_b)
		return await self._repo.find(pair) is not None

	async def list_matches(self, user_id: str) -> List[MatchView]:
		matches = await self._repo.list_for_user(user_id)
		profiles = await self.users.get_many(match.other(user_id) for match in matches)
		views: List[MatchView] = []
		for match in matches:
			other_id = match.other(user_id)
			profile = profiles.get(other_id)
			user = MatchedUser.from_profile(profile) if profile else MatchedUser(id=other_id, username=other_id)
			views.append(MatchView(id=match.id, user=user, created_at=match.created_at))
		return views


_SERVICE: MatchService | None = None


def get_service() -> MatchService:
	global _SERVICE
	if _SERVICE is None:
		_SERVICE = MatchService()
	return _SERVICE


def set_service(service: MatchService | None) -> None:
	global _SERVICE
	_SERVICE = service


async def get_or_create(user_a: str, user_b: str) -> Upserted[Match]:
	return await get_service().get_or_create(user_a, user_b)


async def exists(user_a: str, user_b: str) -> bool:
	return await get_service().exists(user_a, user_b)


async def list_matches(user_id: str) -> List[MatchView]:
	return await get_service().list_matches(user_id)
