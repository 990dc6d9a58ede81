"""Health endpoint router composition for app and token store checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ringcentral_fax.db import DatabaseHealthPort


def api_create_health_router(db_health_service: DatabaseHealthPort | None = None) -> APIRouter:
    """Create health-check router with app and token store connectivity status.

    Args:
        db_health_service: Optional DB-layer health service; the token store is
            reported as `disabled` when omitted.

    Returns:
        APIRouter: Router exposing `/health` endpoint.
    """

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and token store health state.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.
        """

        if db_health_service is None:
            payload = {"status": "ok", "app": "up", "database": "disabled", "detail": "token store not configured"}
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

        try:
            db_health = db_health_service.db_check_health()
            payload = {
                "status": "ok",
                "app": "up",
                "database": db_health.status,
                "detail": db_health.detail,
                "target": db_health_service.db_connection_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)
        except ConnectionError as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "database": "down",
                "detail": str(error),
                "target": db_health_service.db_connection_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return router
