"""Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import faq_router, health_router, hierarchy_router, level_routers, news_router
from app.api.middleware import setup_middleware
from app.catalog.registry import get_registry
from app.infrastructure.config import settings
from app.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging()
    logger.info(
        "Starting Catalog API",
        version=settings.api_version,
        debug=settings.debug,
        storage=settings.storage_backend,
    )

    if settings.storage_backend == "sql":
        from app.catalog import models  # noqa: F401  registers tables on Base
        from app.infrastructure.database import create_tables, engine

        await create_tables()
        logger.info("Database tables ready")

    get_registry()

    yield

    if settings.storage_backend == "sql":
        await engine.dispose()

    logger.info("Shutting down Catalog API")


app = FastAPI(
    title="Catalog API",
    description="Five-level product catalog with hierarchy traversal, news and FAQ",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware and exception handlers
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(hierarchy_router)
for router in level_routers:
    app.include_router(router)
app.include_router(news_router)
app.include_router(faq_router)
