"""
Channel Hub API Server

Entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.responses import JSONResponse

from channelhub import __version__
from channelhub.api.auth import router as auth_router
from channelhub.api.v1 import router as api_v1_router
from channelhub.core.config import get_settings
from channelhub.core.database import get_session, init_db
from channelhub.core.errors import register_error_handlers
from channelhub.core.logging import configure_logging
from channelhub.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("channelhub.starting", version=__version__)
    await init_db()
    yield
    log.info("channelhub.stopping")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    app = FastAPI(
        title="Channel Hub",
        description="Channels and membership with session auth and role-based access control.",
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware (last added runs first)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token"],
    )

    register_error_handlers(app)

    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check(session: AsyncSession = Depends(get_session)):
        """Readiness check endpoint for startup probes. Verifies the database is reachable."""
        try:
            await session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            log.error("channelhub.not_ready", error=repr(exc))
            return JSONResponse(status_code=503, content={"status": "unavailable"})
        return {"status": "ready"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run(
        "channelhub.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )
