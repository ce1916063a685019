"""Person API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PersonApiError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, client pool and external call service built once in lifespan
      and released on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Client pool and call service kept on app.state and resolved via dependencies,
      so every request shares the same immutable configuration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from person_api.api.error_handlers import register_error_handlers
from person_api.api.http_logger_middleware import HttpLoggerMiddleware
from person_api.api.routes import health, person
from person_api.config import get_settings
from person_api.infrastructure.client_pool import build_client_pool
from person_api.infrastructure.database import close_db, init_db
from person_api.infrastructure.http_capture import LoggingInterceptor
from person_api.infrastructure.observability import setup_logging
from person_api.infrastructure.retry_policy import RetryConfig
from person_api.services.external_call_service import ExternalCallService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    pool = build_client_pool(
        settings,
        interceptor=LoggingInterceptor(body_limit=settings.http_log_body_limit),
    )
    app.state.client_pool = pool
    app.state.external_call_service = ExternalCallService(
        pool,
        settings.external_service_client_name,
        RetryConfig(
            max_attempts=settings.retry_max_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        ),
    )
    logger.info("Person API started")
    yield
    logger.info("Person API shutting down")
    await pool.aclose()
    await close_db()


app = FastAPI(
    title="Person API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    HttpLoggerMiddleware, body_limit=settings.http_log_body_limit,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(person.router)

register_error_handlers(app)
