"""Database Session Manager — table creation, sessions, health check, shutdown."""

import pytest
from sqlalchemy import inspect, text

import users_api.infrastructure.database as db_module
from users_api.infrastructure.database import DatabaseSessionManager, close_db, init_db


@pytest.fixture
async def manager(tmp_path):
    m = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'users.db'}")
    yield m
    await m.close()


async def _table_names(manager):
    async with manager.engine.connect() as conn:
        return await conn.run_sync(lambda c: inspect(c).get_table_names())


async def test_create_tables_is_idempotent(manager):
    await manager.create_tables()
    await manager.create_tables()
    assert "users" in await _table_names(manager)


async def test_health_check_succeeds(manager):
    assert await manager.health_check() is True


async def test_session_rolls_back_and_reraises(manager):
    with pytest.raises(RuntimeError):
        async with manager.session() as db:
            await db.execute(text("SELECT 1"))
            raise RuntimeError("handler failed")


async def test_init_and_close_db_manage_singleton(monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)

    created = init_db("sqlite+aiosqlite:///:memory:")
    assert db_module.db_manager is created

    await close_db()
    assert db_module.db_manager is None


async def test_get_db_requires_initialization(monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    with pytest.raises(RuntimeError):
        async for _ in db_module.get_db():
            pass
