import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from fakeredis.aioredis import FakeRedis

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from hackmate.domain.chat import service as chat_service
from hackmate.domain.invitations import service as invitation_service
from hackmate.domain.matches import service as match_service
from hackmate.domain.notifications import NotificationDispatcher, set_dispatcher
from hackmate.domain.users import repo as user_repo
from hackmate.infra import postgres
from hackmate.infra.memory import get_memory_db
from hackmate.main import app
from hackmate.settings import settings


class FakeMailer:
	def __init__(self) -> None:
		self.sent: list[dict] = []
		self.fail = False

	async def send(self, to_email: str, subject: str, body_html: str) -> None:
		if self.fail:
			raise ConnectionError("smtp unavailable")
		self.sent.append({"to": to_email, "subject": subject, "html": body_html})


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from hackmate.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Run every test against the in-memory store with dev header auth enabled."""
	original_env = settings.environment
	original_backend = settings.store_backend
	settings.environment = "dev"
	settings.store_backend = "memory"
	try:
		yield
	finally:
		settings.environment = original_env
		settings.store_backend = original_backend


@pytest.fixture
def mailer():
	return FakeMailer()


@pytest_asyncio.fixture(autouse=True)
async def fresh_state(mailer):
	get_memory_db().reset()
	invitation_service.set_service(None)
	match_service.set_service(None)
	chat_service.set_service(None)
	user_repo.set_directory(None)
	dispatcher = NotificationDispatcher(mailer=mailer, enabled=True)
	set_dispatcher(dispatcher)
	try:
		yield dispatcher
	finally:
		await dispatcher.drain(timeout=1.0)
		set_dispatcher(None)
		get_memory_db().reset()


@pytest.fixture
def memory_db():
	return get_memory_db()


@pytest.fixture
def users(memory_db):
	"""alice, bob and carol; ids sort alice < bob < carol."""
	for user_id, name in (("alice", "Alice Chen"), ("bob", "Bob Okafor"), ("carol", "Carol Silva")):
		memory_db.add_user(
			user_id,
			username=user_id,
			display_name=name,
			email=f"{user_id}@example.com",
			bio=f"{name} builds things",
			skills=("python",),
		)
	return memory_db.users


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
