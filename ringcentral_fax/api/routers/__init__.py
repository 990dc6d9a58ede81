"""API router package for endpoint composition."""

from .fax import api_create_fax_router
from .health import api_create_health_router
from .oauth import api_create_oauth_router

__all__ = ["api_create_fax_router", "api_create_health_router", "api_create_oauth_router"]
