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

from rosematch.domain.discovery import service as discovery_service
from rosematch.domain.discovery.resolver import FixedSource
from rosematch.main import app
from rosematch.settings import settings


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from rosematch.infra.redis import redis_client, set_redis_client
	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Ensure a consistent test environment.

	API tests identify the viewer via X-User-Id, which is only accepted in dev mode.
	"""
	original_env = settings.environment
	original_sampling = settings.obs_log_sampling_rate_info
	settings.environment = "dev"
	settings.obs_log_sampling_rate_info = 0.0
	try:
		yield
	finally:
		settings.environment = original_env
		settings.obs_log_sampling_rate_info = original_sampling


@pytest.fixture(autouse=True)
def fresh_discovery_service(monkeypatch):
	"""Give every test its own session registry and a pinned match draw.

	The draw of 0.99 means plain accepts never match unless a test overrides it.
	"""
	instance = discovery_service.DiscoveryService(source_factory=lambda: FixedSource([0.99]))
	monkeypatch.setattr(discovery_service, "_service", instance)
	return instance


@pytest_asyncio.fixture
async def api_client():
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
