"""
API package for the GeneratePress abilities service.

This package contains FastAPI routers for all API endpoints.
"""

from .abilities import router as abilities_router
from .health import router as health_router

__all__ = [
    "abilities_router",
    "health_router",
]
