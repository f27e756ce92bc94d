"""Users API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map every failure → structured JSON responses
    - CORS and rate limit configured from settings (not hardcoded)
    - users table ensured on startup, before the server accepts connections
    - /test-db registered only outside production

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - rate_limiter kept at module level so tests can reset it between cases
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from users_api.api.error_handlers import register_error_handlers
from users_api.api.rate_limit import RateLimitMiddleware, SlidingWindowRateLimiter
from users_api.api.routes import health, users
from users_api.config import get_settings
from users_api.infrastructure.database import close_db, init_db
from users_api.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await manager.create_tables()
    logger.info(f"Users API started ({settings.app_env})")
    yield
    logger.info("Users API shutting down")
    await close_db()


settings = get_settings()

app = FastAPI(title="Users API", version="1.0.0", lifespan=lifespan)

rate_limiter = SlidingWindowRateLimiter(
    max_requests=settings.rate_limit_max_requests,
    window_seconds=settings.rate_limit_window_seconds,
)

# Added last → runs first: CORS preflights are answered before counting
app.add_middleware(RateLimitMiddleware, limiter=rate_limiter, path_prefix="/api")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
if not settings.is_production:
    app.include_router(health.diagnostics_router)

register_error_handlers(app)
