"""FastAPI application factory.

create_app() returns a configured FastAPI instance. It also builds the
process-wide realtime pieces (ConnectionRegistry + Notifier) and the
Mailer and hangs them on app.state; handlers reach them through
dependencies, so tests can swap them out.

Lifespan manages Redis (optional) and the database engine.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hireboard import __version__
from hireboard.api import api_router
from hireboard.config import settings
from hireboard.logging_config import configure_logging
from hireboard.realtime import ConnectionRegistry, Notifier
from hireboard.services.email import Mailer

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "hireboard.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
        email_enabled=app.state.mailer.enabled,
    )

    from hireboard.db.redis import close_redis, init_redis
    try:
        await init_redis()
        logger.info("hireboard.redis_connected", url=settings.redis_url)
    except Exception as e:
        # Redis only backs rate limiting; run without it.
        logger.warning("hireboard.redis_unavailable", error=str(e))

    yield

    logger.info("hireboard.shutdown")

    # Let in-flight pushes and emails finish before tearing down.
    await app.state.notifier.flush()
    await app.state.mailer.flush()

    await close_redis()

    from hireboard.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    configure_logging(settings)

    app = FastAPI(
        title="Hireboard",
        description="Job board API — postings, applications, alerts, live updates",
        version=__version__,
        lifespan=lifespan,
    )

    # One registry per process; every user starts offline.
    registry = ConnectionRegistry()
    app.state.registry = registry
    app.state.notifier = Notifier(registry)
    app.state.mailer = Mailer(settings)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → RateLimit → Security → RequestId → handler

    from hireboard.middleware.rate_limit import RateLimitMiddleware
    from hireboard.middleware.request_id import RequestIdMiddleware
    from hireboard.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        default_rpm=settings.rate_limit_rpm,
        auth_rpm=settings.rate_limit_auth_rpm,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list({settings.client_url, *settings.cors_origins}),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )

    app.include_router(api_router)

    from hireboard.realtime.websocket import router as ws_router
    app.include_router(ws_router)

    return app


# Default app instance (used by uvicorn: hireboard.main:app)
app = create_app()
