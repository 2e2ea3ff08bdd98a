"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from lockedin.config import get_settings
from lockedin.database import close_db, create_tables, init_db
from lockedin.groups.router import router as groups_router
from lockedin.health.router import router as health_router
from lockedin.middleware import setup_middleware
from lockedin.streaks.router import router as streaks_router
from lockedin.users.router import router as users_router
from lockedin.violations.router import router as violations_router
from lockedin.ws.manager import GroupBroadcaster
from lockedin.ws.router import router as ws_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(
        settings.database_url,
        echo=settings.database_echo,
        busy_timeout=settings.database_busy_timeout,
    )
    if settings.create_tables_on_startup:
        await create_tables()
    logger.info("startup_complete", environment=settings.environment)

    yield

    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Locked In API",
        description="Group accountability for distracting websites: violations, streaks and live busts",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.broadcaster = GroupBroadcaster()

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(groups_router)
    app.include_router(streaks_router)
    app.include_router(violations_router)
    app.include_router(ws_router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run("lockedin.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
