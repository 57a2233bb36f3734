"""Fire-and-forget notification dispatch.

``notify`` schedules delivery on the running loop and returns immediately.
Whatever happens during delivery (unknown recipient, missing email, SMTP
failure) is logged and counted; nothing is raised back to the caller, whose
state change has already committed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Set

from hackmate.domain.users.repo import UserDirectory, get_directory
from hackmate.obs import metrics as obs_metrics
from hackmate.settings import settings

from . import templates
from .mailer import Mailer, SmtpMailer, mask_email

logger = logging.getLogger(__name__)


class NotificationDispatcher:
	def __init__(
		self,
		*,
		mailer: Mailer | None = None,
		users: UserDirectory | None = None,
		enabled: Optional[bool] = None,
	) -> None:
		self._mailer = mailer or SmtpMailer()
		self._users = users
		self._enabled = enabled
		self._tasks: Set[asyncio.Task] = set()

	@property
	def enabled(self) -> bool:
		return settings.notifications_enabled if self._enabled is None else self._enabled

	@property
	def pending(self) -> int:
		return len(self._tasks)

	def notify(self, to_user_id: str, kind: str, data: Mapping[str, Any]) -> Optional[asyncio.Task]:
		if not self.enabled:
			obs_metrics.inc_notification(kind, "disabled")
			return None
		task = asyncio.create_task(self._deliver(str(to_user_id), kind, dict(data)))
		self._tasks.add(task)
		obs_metrics.set_notifications_pending(len(self._tasks))
		task.add_done_callback(self._forget)
		return task

	def _forget(self, task: asyncio.Task) -> None:
		self._tasks.discard(task)
		obs_metrics.set_notifications_pending(len(self._tasks))

	async def _deliver(self, to_user_id: str, kind: str, data: dict[str, Any]) -> None:
		try:
			users = self._users or get_directory()
			recipient = await users.get(to_user_id)
			if recipient is None or not recipient.email:
				logger.warning("notification_skipped", extra={"kind": kind, "to_user_id": to_user_id, "why": "no_email"})
				obs_metrics.inc_notification(kind, "skipped")
				return
			rendered = templates.render(kind, recipient.name, data)
			await self._mailer.send(recipient.email, rendered.subject, rendered.html)
		except asyncio.CancelledError:
			obs_metrics.inc_notification(kind, "cancelled")
			raise
		except Exception:
			logger.exception("notification_failed", extra={"kind": kind, "to_user_id": to_user_id})
			obs_metrics.inc_notification(kind, "failed")
			return
		logger.info("notification_sent", extra={"kind": kind, "recipient": mask_email(recipient.email)})
		obs_metrics.inc_notification(kind, "sent")

	async def drain(self, timeout: float | None = 5.0) -> None:
		"""Wait for outstanding deliveries; cancel whatever is left after ``timeout``."""
		if not self._tasks:
			return
		tasks = list(self._tasks)
		_, still_running = await asyncio.wait(tasks, timeout=timeout)
		for task in still_running:
			task.cancel()
		if still_running:
			await asyncio.gather(*still_running, return_exceptions=True)
			logger.warning("notifications_cancelled_on_drain", extra={"count": len(still_running)})


_DISPATCHER: NotificationDispatcher | None = None


def get_dispatcher() -> NotificationDispatcher:
	global _DISPATCHER
	if _DISPATCHER is None:
		_DISPATCHER = NotificationDispatcher()
	return _DISPATCHER


def set_dispatcher(dispatcher: NotificationDispatcher | None) -> None:
	global _DISPATCHER
	_DISPATCHER = dispatcher


def notify(to_user_id: str, kind: str, data: Mapping[str, Any]) -> Optional[asyncio.Task]:
	return get_dispatcher().notify(to_user_id, kind, data)
