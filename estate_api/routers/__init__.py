"""
API route handlers for the Real Estate Listings API.
Provides organized routing for different API endpoints.
"""

from .auth import router as auth_router
from .properties import router as properties_router
from .images import router as images_router
from .favorites import router as favorites_router
from .health import router as health_router

__all__ = [
    "auth_router",
    "properties_router",
    "images_router",
    "favorites_router",
    "health_router"
]
