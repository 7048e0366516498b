import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from casevault.config import settings
from casevault.database import dispose_engine, init_db
from casevault.models import *  # noqa: F403
from casevault.services.storage_service import close_storage

APP_VERSION = "0.1.0"
logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Apply the configured level to the package loggers.

    Handlers are left to the server (uvicorn installs its own).
    """
    logging.getLogger("casevault").setLevel((level or settings.log_level).upper())


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging()
    # Startup: create tables
    await init_db()
    logger.info("casevault %s started (%s)", APP_VERSION, settings.environment)

    yield

    # Shutdown: release the storage transport and dispose connection pool
    await close_storage()
    await dispose_engine()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Cache-Control"] = "no-store"
        return response


def create_app() -> FastAPI:
    app = FastAPI(
        title="Case Vault",
        description="Integrity-verified storage for case notes, tabs and images",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    # CORS configurable via CORS_ORIGINS env var
    allowed_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Content-Version", "X-Content-MD5", "X-Content-SHA256"],
    )

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    # Register REST routers
    from casevault.api import API_PREFIX, API_ROUTERS

    for router in API_ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    return app


app = create_app()
