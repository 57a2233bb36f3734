"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hackmate.api import invitations, matches, messages, ops
from hackmate.api.errors import install_error_handlers
from hackmate.domain.notifications import get_dispatcher
from hackmate.domain.users import demo
from hackmate.infra import postgres
from hackmate.infra.memory import get_memory_db
from hackmate.obs import init as obs_init
from hackmate.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	if not settings.uses_memory_store():
		await postgres.init_pool()
	elif settings.is_dev():
		demo.seed_memory(get_memory_db())
	logger.info("startup", extra={"store_backend": settings.store_backend})
	try:
		yield
	finally:
		await get_dispatcher().drain()
		await postgres.close_pool()


app = FastAPI(title="HackMate Core", lifespan=lifespan)
install_error_handlers(app)

if settings.cors_allow_origins:
	allow_origins = list(settings.cors_allow_origins)
elif settings.is_dev():
	allow_origins = [
		"http://localhost:3000",
		"http://127.0.0.1:3000",
		"http://localhost:5173",
		"http://127.0.0.1:5173",
	]
else:
	allow_origins = [settings.app_url]

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
obs_init(app)

app.include_router(invitations.router)
app.include_router(matches.router)
app.include_router(messages.router)
app.include_router(ops.router)
