"""Shared fixtures: memory-backed settings, stores, service and API client."""
import os

# must be in place before cancelflow.config builds the module-level settings
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("MEMORY_STORE_TTL_MINUTES", "0")

import httpx
import pytest
import pytest_asyncio

from cancelflow.config import Settings
from cancelflow.container import build_memory_service, build_memory_stores
from cancelflow.web.server import create_app

# sha256 last hex digit: ...0001 -> "c" (even, A), ...0004 -> "9" (odd, B)
USER_A = "550e8400-e29b-41d4-a716-446655440001"
USER_B = "550e8400-e29b-41d4-a716-446655440004"
SUBSCRIPTION_ID = "sub_001"


@pytest.fixture
def cfg() -> Settings:
    return Settings(
        STORAGE_BACKEND="memory",
        MEMORY_STORE_TTL_MINUTES=0,
        VARIANT_POLICY="deterministic",
        DEMO_USER_ID=USER_A,
        DEMO_SUBSCRIPTION_ID=SUBSCRIPTION_ID,
        DEMO_MONTHLY_PRICE_CENTS=2500,
    )


@pytest.fixture
def stores(cfg):
    return build_memory_stores(cfg)


@pytest.fixture
def service(stores, cfg):
    return build_memory_service(stores, cfg)


@pytest.fixture
def app(cfg, stores):
    return create_app(cfg, memory=stores)


@pytest_asyncio.fixture
async def api_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
