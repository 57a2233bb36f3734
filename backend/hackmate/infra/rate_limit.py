"""Simple Redis-backed rate limiting utilities."""

from __future__ import annotations

import logging
import math
import time
from typing import Iterable, Optional, Tuple

from redis.exceptions import RedisError

from hackmate.domain.common.errors import InfraError, TooManyRequests
from hackmate.infra.redis import redis_client
from hackmate.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


class RateLimitExceeded(TooManyRequests):
	"""Raised when the rate limit has been hit."""

	def __init__(self, reason: str = "rate_limited", *, retry_after: int | None = None) -> None:
		super().__init__(reason)
		self.retry_after = retry_after


class RateLimiterUnavailable(InfraError):
	reason = "rate_limiter_unavailable"


async def _touch(key: str, ttl_seconds: int) -> int:
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, ttl_seconds)
		count, _ = await pipe.execute()
	return int(count)


async def allow(
	kind: str,
	actor_id: str,
	*,
	limit: int,
	window_seconds: int = 60,
	now: Optional[float] = None,
) -> bool:
	"""Return True when the operation is still within the allowed budget."""

	if limit <= 0:
		return False
	now = now or time.time()
	window = max(1, int(window_seconds))
	slot = int(math.floor(now / window))
	key = f"rl:{kind}:{actor_id}:{slot}:{window}"
	try:
		count = await _touch(key, window)
	except RedisError as exc:
		logger.warning("Rate limiter unavailable for %s: %s", kind, exc.__class__.__name__)
		raise RateLimiterUnavailable() from exc
	return count <= limit


async def enforce(kind: str, actor_id: str, rules: Iterable[Tuple[str, int, int]]) -> None:
	"""Check every ``(label, limit, window_seconds)`` rule, raising on the first breach."""
	for label, limit, window_seconds in rules:
		if not await allow(f"{kind}:{label}", actor_id, limit=limit, window_seconds=window_seconds):
			obs_metrics.inc_rate_limited(kind, label)
			raise RateLimitExceeded(retry_after=window_seconds)
