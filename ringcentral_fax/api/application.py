"""FastAPI application factory for the fax bridge runtime.

This module defines API application composition around one fax adapter.
"""

from fastapi import FastAPI

from ringcentral_fax.adapters import FaxSenderPort, OAuthFlowPort
from ringcentral_fax.config import AppSettings
from ringcentral_fax.db import DatabaseHealthPort

from .routers import api_create_fax_router, api_create_health_router, api_create_oauth_router


def create_api_application(
    settings: AppSettings,
    fax_sender: FaxSenderPort,
    oauth_flow: OAuthFlowPort | None = None,
    db_health_service: DatabaseHealthPort | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        fax_sender: Adapter used by the fax endpoint.
        oauth_flow: Optional OAuth flow implementation; OAuth routes are omitted when None.
        db_health_service: Optional token store health service.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when fax_sender is None.
    """
    application = FastAPI(title="RingCentral Fax Bridge")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return service metadata for bootstrap verification.

        Returns:
            dict[str, str]: Service name, status, environment and fax provider.
        """

        return {
            "service": "ringcentral-fax",
            "status": "ready",
            "environment": settings.environment_name,
            "fax_provider": fax_sender.adapter_source_name(),
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service))
    application.include_router(api_create_fax_router(fax_sender=fax_sender))
    if oauth_flow is not None:
        application.include_router(api_create_oauth_router(oauth_flow=oauth_flow))

    return application
