"""Service test fixtures: async DB + FastAPI test client + scripted external service.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so readiness probes hit the test DB
    - get_external_call_service overridden with a service over a scripted transport

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - external_script fixture is a plain list: tests append steps before the first request
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from httpx import ASGITransport, AsyncClient

from person_api.api.dependencies import get_external_call_service
from person_api.db.base import Base
from person_api.db.session import create_session_factory
from person_api.infrastructure.database import get_db, DatabaseSessionManager
import person_api.infrastructure.database as db_module
from person_api.main import app

from tests.services.mock_external import build_service


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def external_script():
    """Script steps consumed by the scripted external service (see mock_external)."""
    return []


@pytest.fixture
async def external(external_script):
    service, scripted, pool = build_service(external_script, max_attempts=2)
    yield {"service": service, "transport": scripted}
    await pool.aclose()


@pytest.fixture
async def client(test_engine, test_session_factory, external):
    """FastAPI test client with DB and external service dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_external_call_service] = lambda: external["service"]

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
