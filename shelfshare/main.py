"""ShelfShare API — FastAPI application entry point.

Invariants:
    - Startup order: logging, signing key, database. A weak SECRET_KEY aborts
      startup before any connection is opened
    - Routers are registered explicitly, all under /api/v1
    - Error handlers are installed last so they cover every router
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shelfshare import __version__
from shelfshare.api.dependencies import get_token_service
from shelfshare.api.error_handlers import register_error_handlers
from shelfshare.api.routes import auth, books, health, loans, reviews, users
from shelfshare.config import get_settings
from shelfshare.infrastructure import database
from shelfshare.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)

ROUTERS = (
    health.router, auth.router, users.router,
    books.router, loans.router, reviews.router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    get_token_service()
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info(f"ShelfShare API {__version__} started ({settings.app_env})")
    try:
        yield
    finally:
        await manager.dispose()
        logger.info("ShelfShare API stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    application = FastAPI(title="ShelfShare API", version=__version__, lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    for router in ROUTERS:
        application.include_router(router)
    register_error_handlers(application)
    return application


app = create_app()
