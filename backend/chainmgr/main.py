"""Chain Manager API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ChainManagerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized and reset-group-list task started via lifespan;
      both torn down on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - The background task is stored on app.state so the teardown route can
      signal it without a module-level global
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chainmgr.api.error_handlers import register_error_handlers
from chainmgr.api.routes import chains, health
from chainmgr.config import get_settings
from chainmgr.infrastructure import database
from chainmgr.infrastructure.observability import setup_logging
from chainmgr.services.reset_group_list_task import ResetGroupListTask

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    reset_task = ResetGroupListTask(
        manager, settings.reset_group_list_interval_seconds,
    )
    reset_task.start()
    app.state.reset_group_list_task = reset_task
    logger.info("Chain manager API started")
    yield
    logger.info("Chain manager API shutting down")
    await reset_task.stop()
    await manager.dispose()


app = FastAPI(
    title="Chain Manager API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(chains.router)

register_error_handlers(app)
