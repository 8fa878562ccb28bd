"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import v1_router
from app.core.config import Settings
from app.core.database import Database
from app.core.errors import ConfigError, register_exception_handlers

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.getLogger("app").setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    database: Database = app.state.database
    # Startup: ensure tables exist (use Alembic in production)
    if app.state.settings.auto_create_tables:
        try:
            await database.create_all()
        except ConfigError:
            logger.error("DATABASE_URL is not configured; requests will fail until it is set")
    yield
    await database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around one explicitly constructed Settings object."""
    settings = settings or Settings()
    configure_logging(settings)

    app = FastAPI(
        title="InviteGate",
        version="0.1.0",
        description="Invite-code redemption and tenant session bootstrap",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = Database(settings)

    # ── CORS ─────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # ── API routes ───────────────────────────────────────────
    app.include_router(v1_router)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
