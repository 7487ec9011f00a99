"""API layer module.

Contains FastAPI routers, middleware and request/response schemas.
"""

from app.api.entities import faq_router, level_routers, news_router
from app.api.health import router as health_router
from app.api.hierarchy import router as hierarchy_router

__all__ = [
    "faq_router",
    "health_router",
    "hierarchy_router",
    "level_routers",
    "news_router",
]
