"""Domain models used across application layer boundaries."""

from .models import FaxAttachment, FaxRequest, HealthStatus, TokenSet

__all__ = ["FaxAttachment", "FaxRequest", "HealthStatus", "TokenSet"]
