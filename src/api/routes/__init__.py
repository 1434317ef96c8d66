"""API route modules."""

from .health import router as health_router
from .reports import router as reports_router
from .settings import router as settings_router

__all__ = ["health_router", "reports_router", "settings_router"]
