"""Movements API: application wiring."""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, settings as default_settings
from app.logging_config import configure_logging
from app.middleware import CatchAllErrorMiddleware, JSONBodyParserMiddleware, RequestLoggerMiddleware
from app.api.routes_movements import router as default_movements_router

MOVEMENTS_PREFIX = "/api/movements"

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, movements_router: APIRouter | None = None) -> FastAPI:
    """Build the application.

    Middleware runs in this order for every request: CORS, request logger,
    catch-all error responder, JSON body parser, then the movements router.
    """
    settings = settings or default_settings
    movements_router = movements_router or default_movements_router
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the movement store before serving requests."""
        from app.movements.store import get_movement_store
        get_movement_store()

        yield

        logger.info("Movements API shutting down...")

    app = FastAPI(
        title="Movements API",
        description="Income and expense movements over HTTP.",
        version="1.0.0",
        lifespan=lifespan,
    )

    # add_middleware wraps the current stack, so the last one added runs first.
    app.add_middleware(JSONBodyParserMiddleware, limit=settings.json_limit)
    app.add_middleware(CatchAllErrorMiddleware)
    app.add_middleware(RequestLoggerMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(movements_router, prefix=MOVEMENTS_PREFIX)

    return app


app = create_app()
