"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rosematch import obs
from rosematch.api import chat, discovery, ops
from rosematch.api.errors import install_error_handlers
from rosematch.infra.redis import redis_client
from rosematch.obs import logging as obs_logging
from rosematch.settings import settings

log = obs_logging.get_logger("rosematch.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
	log.info("startup", extra={"environment": settings.environment})
	try:
		yield
	finally:
		try:
			await redis_client.aclose()
		except Exception:
			log.warning("redis_close_failed", exc_info=True)


app = FastAPI(title="RoseMatch Discovery", lifespan=lifespan)
obs.init(app)
install_error_handlers(app)

allow_origins = list(getattr(settings, "cors_allow_origins", []))
if not allow_origins:
	allow_origins = ["http://localhost:3000", "http://localhost:5173"] if settings.is_dev() else []

# Starlette disallows wildcard '*' with allow_credentials=True.
if "*" in allow_origins:
	allow_origins = ["http://localhost:3000", "http://localhost:5173"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

app.include_router(ops.router)
app.include_router(discovery.router)
app.include_router(chat.router)
