"""FastAPI application factory.

create_app() returns a configured FastAPI instance: logging, exception
handlers, middleware, and routers. Lifespan logs startup and disposes
the database engine on shutdown.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from proctor import __version__
from proctor.api import api_router
from proctor.config import settings
from proctor.errors import register_exception_handlers
from proctor.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "proctor.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        bootstrap_admin=bool(settings.admin_username),
        unregistered_principal_role=settings.unregistered_principal_role,
    )

    yield

    logger.info("proctor.shutdown")

    from proctor.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title="Proctor",
        description="Directory of users, SSH public keys, and teams",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from proctor.middleware.request_id import RequestIdMiddleware
    from proctor.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware, hsts_max_age=settings.hsts_max_age)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: proctor.main:app)
app = create_app()
