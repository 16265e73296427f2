"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventsync.api.errors import register_error_handlers
from inventsync.api.routes import ebay, health, products
from inventsync.config import settings
from inventsync.infrastructure.database.connection import Database
from inventsync.logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    database: Database = app.state.database
    await database.open(create_tables=settings.create_tables_on_startup)
    logger.info("inventsync_starting")
    yield
    logger.info("inventsync_stopping")
    await database.close()


def create_app(database: Database | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(
        title="InventSync",
        description="Multi-channel inventory manager with eBay listing.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.database = database or Database(settings.database_url, echo=settings.database_echo)

    # Mobile clients send no Origin header; browsers are held to the configured list
    # plus local development hosts.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=r"https?://(localhost|127\.0\.0\.1|10\.0\.2\.2|192\.168\.\d+\.\d+)(:\d+)?",
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(ebay.router)

    return app


app = create_app()
