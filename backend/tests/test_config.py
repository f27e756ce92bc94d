"""Application Configuration — URL rewriting, run mode and defaults."""

import pytest

from users_api.config import Settings


def test_postgres_url_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@db:5432/users")
    assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/users"


def test_other_urls_untouched():
    settings = Settings(database_url="sqlite+aiosqlite:///:memory:")
    assert settings.database_url == "sqlite+aiosqlite:///:memory:"


@pytest.mark.parametrize("app_env, expected", [
    ("production", True),
    ("PRODUCTION", True),
    ("development", False),
    ("test", False),
    ("staging", False),
])
def test_is_production(app_env, expected):
    assert Settings(app_env=app_env).is_production is expected


def test_rate_limit_defaults(monkeypatch):
    monkeypatch.delenv("RATE_LIMIT_MAX_REQUESTS", raising=False)
    monkeypatch.delenv("RATE_LIMIT_WINDOW_SECONDS", raising=False)
    settings = Settings()
    assert settings.rate_limit_max_requests == 100
    assert settings.rate_limit_window_seconds == 900
