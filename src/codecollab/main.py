"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (engine disposal).
Middleware, CORS, error handlers, and routers all registered here.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codecollab import __version__
from codecollab.api import api_router
from codecollab.api.errors import register_error_handlers
from codecollab.config import settings
from codecollab.middleware.request_context import RequestContextMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs at shutdown.
    Schema management is Alembic's job, not the app's.
    """
    logger.info(
        "codecollab.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        reads_require_auth=settings.require_auth_for_reads,
    )

    yield

    logger.info("codecollab.shutdown")

    from codecollab.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="CodeCollab",
        description="Students, their projects, and open collaboration",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestContext → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    register_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: codecollab.main:app)
app = create_app()
