from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gathevent_api.config import settings
from gathevent_api.db.session import shutdown
from gathevent_api.handlers import register_exception_handlers
from gathevent_api.logging import get_logger
from gathevent_api.middleware import PrettyJSONMiddleware, RequestIDMiddleware
from gathevent_api.routers import auth, health

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager — code before yield runs on startup, after yield on shutdown.

    Shutdown: close database connections gracefully.
    """
    logger.info("startup", app=settings.app_name, version=settings.app_version)
    yield
    await shutdown()
    logger.info("shutdown")


def create_app() -> FastAPI:
    """Build the application: middleware, error handlers, routers, OpenAPI document."""
    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.add_middleware(RequestIDMiddleware)
    # Added last so it is outermost and also formats rendered error envelopes
    app.add_middleware(PrettyJSONMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)

    return app


app = create_app()
