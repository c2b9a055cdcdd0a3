import os

# Settings are read at import time; point them at throwaway backends first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_URL"] = "redis://localhost:6379/9"
os.environ["CONTENT_BACKEND"] = "none"
os.environ["VERSION_BACKEND"] = "none"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dms_api.core.capabilities import CapabilityRegistry
from dms_api.db.init_db import init_db
from tests.fakes import FakeEcm, full_registry


@pytest.fixture
def provider() -> FakeEcm:
    return FakeEcm()


@pytest.fixture
def registry(provider) -> CapabilityRegistry:
    return full_registry(provider)


@pytest.fixture
def empty_registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session(engine):
    sessions = async_sessionmaker(engine, expire_on_commit=False)
    async with sessions() as session:
        yield session


@pytest.fixture
async def sessions(tmp_path):
    # A file database gives each session its own connection.
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'dms.db'}")
    await init_db(engine)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


def _client_for(registry: CapabilityRegistry):
    from dms_api.db.session import get_session
    from dms_api.main import app
    from dms_api.ports.registry import get_capabilities

    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    sessions = async_sessionmaker(engine, expire_on_commit=False)
    state = {"ready": False}

    async def _session():
        if not state["ready"]:
            await init_db(engine)
            state["ready"] = True
        async with sessions() as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_capabilities] = lambda: registry
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(registry):
    yield from _client_for(registry)


@pytest.fixture
def bare_client(empty_registry):
    yield from _client_for(empty_registry)
