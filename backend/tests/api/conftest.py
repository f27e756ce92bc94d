"""Route test fixtures — FastAPI test client over the in-memory database.

Invariants:
    - get_db dependency overridden to use the test engine
    - db_manager patched for probes that bypass get_db
    - Rate limiter and dependency overrides reset around every test

Design Decisions:
    - raise_app_exceptions=False: unhandled exceptions surface as the 500
      response the catch-all handler produced, as a real client would see
"""

import pytest
from httpx import ASGITransport, AsyncClient

from users_api.api.routes.users import get_user_repository
from users_api.core.outcomes import Found, Missing
from users_api.infrastructure.database import get_db, DatabaseSessionManager
import users_api.infrastructure.database as db_module
from users_api.main import app, rate_limiter


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager
    rate_limiter.reset()

    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
    rate_limiter.reset()


class RecordingRepository:
    """UserRepository fake — records calls, returns a configured outcome."""

    def __init__(self, outcome=None):
        self.calls: list[str] = []
        self.outcome = outcome if outcome is not None else Missing()

    async def _record(self, name):
        self.calls.append(name)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

    async def create(self, payload):
        return await self._record("create")

    async def list_all(self):
        return await self._record("list_all")

    async def get_by_id(self, user_id):
        return await self._record("get_by_id")

    async def update(self, user_id, payload):
        return await self._record("update")

    async def delete(self, user_id):
        return await self._record("delete")


@pytest.fixture
def fake_repo():
    """Install a RecordingRepository in place of the SQL repository."""
    repo = RecordingRepository(Found([]))
    app.dependency_overrides[get_user_repository] = lambda: repo
    return repo
