"""Mapping from adapter exceptions to deterministic JSON error responses."""

from __future__ import annotations

import logging

from fastapi import status
from fastapi.responses import JSONResponse

from ringcentral_fax.adapters import (
    RingCentralApiError,
    RingCentralAuthError,
    RingCentralConfigurationError,
    RingCentralFaxError,
    RingCentralTimeoutError,
    RingCentralValidationError,
)

logger = logging.getLogger(__name__)


def api_error_status_code(error: RingCentralFaxError) -> int:
    """Return HTTP status code for one adapter error.

    Args:
        error: Adapter-layer exception.

    Returns:
        int: HTTP status code surfaced to API callers.
    """

    if isinstance(error, RingCentralValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, RingCentralConfigurationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(error, RingCentralAuthError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(error, RingCentralTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    return status.HTTP_502_BAD_GATEWAY


def api_error_response(error: RingCentralFaxError) -> JSONResponse:
    """Build JSON error response for one adapter error.

    Args:
        error: Adapter-layer exception.

    Returns:
        JSONResponse: Error payload with status, message and upstream details.
    """

    status_code = api_error_status_code(error)
    payload: dict[str, object] = {
        "status": "error",
        "message": str(error),
        "error_code": error.error_code,
    }
    if isinstance(error, RingCentralApiError) and error.status_code is not None:
        payload["upstream_status"] = error.status_code
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("RingCentral request failed", extra={"status_code": status_code, "error_code": error.error_code})
    return JSONResponse(content=payload, status_code=status_code)
