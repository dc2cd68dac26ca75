"""Record Store API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery); health before records
    - Global error handlers map RecordStoreError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, storage adapter and engine registry built once in the lifespan;
      the registry is read-only afterwards and lives on app.state

Design Decisions:
    - Lifespan context manager instead of @app.on_event hooks
    - Error messages of 5xx responses redacted when environment=production
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.routes import health, records
from app.config import get_settings
from app.db.base import Base
from app.infrastructure.database import init_db
from app.infrastructure.observability import setup_logging
from app.infrastructure.sqlalchemy_storage import SqlAlchemyStorage
from app.models import REGISTERED_MODELS
from app.services.engine_registry import build_registry

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
    storage = SqlAlchemyStorage(manager, Base.metadata)
    app.state.registry = build_registry(
        storage, REGISTERED_MODELS,
        default_timeout=settings.query_timeout_seconds,
    )
    logger.info(f"Record Store API started with models: {app.state.registry.names()}")
    yield
    await manager.dispose()
    logger.info("Record Store API shutting down")


app = FastAPI(
    title="Record Store API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(records.router)

register_error_handlers(app, redact=settings.is_production)
