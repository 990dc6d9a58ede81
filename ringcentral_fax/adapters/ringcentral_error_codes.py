"""Canonical RingCentral error semantics for adapter-layer routing."""

from __future__ import annotations

from enum import Enum
from typing import Any, Final


class RingCentralErrorCode(str, Enum):
    """Known RingCentral error markers used by adapter routing logic."""

    TOKEN_EXPIRED = "token_expired"
    REFRESH_TOKEN_EXPIRED = "refresh_token_expired"
    TOKEN_INVALID = "TokenInvalid"
    TOKEN_EXPIRED_API = "TokenExpired"
    INVALID_GRANT = "invalid_grant"
    INVALID_CLIENT = "invalid_client"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    INVALID_REQUEST = "invalid_request"


RINGCENTRAL_ERROR_DEFAULT_MESSAGES: Final[dict[str, str]] = {
    RingCentralErrorCode.TOKEN_EXPIRED.value: "Access token has expired.",
    RingCentralErrorCode.REFRESH_TOKEN_EXPIRED.value: (
        "Refresh token has expired. Please obtain new access and refresh tokens."
    ),
    RingCentralErrorCode.TOKEN_INVALID.value: "Access token is invalid.",
    RingCentralErrorCode.TOKEN_EXPIRED_API.value: "Access token has expired.",
    RingCentralErrorCode.INVALID_GRANT.value: "Grant is invalid, expired or revoked.",
    RingCentralErrorCode.INVALID_CLIENT.value: "Client authentication failed.",
    RingCentralErrorCode.UNAUTHORIZED_CLIENT.value: "Client is not authorized for this grant type.",
    RingCentralErrorCode.INVALID_REQUEST.value: "Token request is invalid.",
}

RINGCENTRAL_EXPIRED_CODES: Final[frozenset[str]] = frozenset(
    {
        RingCentralErrorCode.TOKEN_EXPIRED.value,
        RingCentralErrorCode.TOKEN_INVALID.value,
        RingCentralErrorCode.TOKEN_EXPIRED_API.value,
    }
)

RINGCENTRAL_EXHAUSTED_CODES: Final[frozenset[str]] = frozenset(
    {
        RingCentralErrorCode.REFRESH_TOKEN_EXPIRED.value,
        RingCentralErrorCode.INVALID_GRANT.value,
    }
)

_HTTP_UNAUTHORIZED: Final[int] = 401


def ringcentral_error_default_message(error_code: str, fallback_message: str) -> str:
    """Return canonical default message for an error code.

    Args:
        error_code: Upstream error code.
        fallback_message: Fallback message when code is unknown.

    Returns:
        str: Canonical message for known code, else provided fallback message.
    """

    return RINGCENTRAL_ERROR_DEFAULT_MESSAGES.get(error_code, fallback_message)


def ringcentral_extract_error(payload: Any, fallback_message: str = "unexpected upstream response") -> tuple[str, str]:
    """Extract normalized error code and message from a RingCentral error body.

    REST API errors carry `errorCode`/`message` (optionally an `errors` list);
    OAuth token endpoint errors carry `error`/`error_description`.

    Args:
        payload: Parsed JSON error body, or any non-mapping value.
        fallback_message: Message used when neither body nor code yields one.

    Returns:
        tuple[str, str]: Normalized error code (`UNKNOWN` when absent) and message.
    """

    if not isinstance(payload, dict):
        return "UNKNOWN", fallback_message

    nested_errors = payload.get("errors")
    first_nested: dict[str, Any] = {}
    if isinstance(nested_errors, list) and nested_errors and isinstance(nested_errors[0], dict):
        first_nested = nested_errors[0]

    error_code = str(
        payload.get("errorCode") or payload.get("error") or first_nested.get("errorCode") or "UNKNOWN"
    ).strip()
    error_message = str(
        payload.get("message") or payload.get("error_description") or first_nested.get("message") or ""
    ).strip()
    if not error_message:
        error_message = ringcentral_error_default_message(error_code, fallback_message)
    return error_code, error_message


def ringcentral_error_is_refresh_exhausted(error_code: str, error_message: str, token_grant: bool = False) -> bool:
    """Return whether an error signals that the refresh capability is gone.

    Args:
        error_code: Normalized upstream error code.
        error_message: Normalized upstream error message.
        token_grant: Whether the error came from a renewal grant on the token endpoint.

    Returns:
        bool: True when the caller must re-authenticate out of band.
    """

    marker = RingCentralErrorCode.REFRESH_TOKEN_EXPIRED.value
    if error_code == marker or marker in error_message:
        return True
    return token_grant and error_code in RINGCENTRAL_EXHAUSTED_CODES


def ringcentral_error_is_token_expired(status_code: int, error_code: str, error_message: str) -> bool:
    """Return whether an API error signals an expired or rejected access token.

    Refresh exhaustion takes precedence and is never reported as expiry.

    Args:
        status_code: Upstream HTTP status code.
        error_code: Normalized upstream error code.
        error_message: Normalized upstream error message.

    Returns:
        bool: True when one refresh and resend is warranted.
    """

    if ringcentral_error_is_refresh_exhausted(error_code, error_message):
        return False
    if status_code == _HTTP_UNAUTHORIZED or error_code in RINGCENTRAL_EXPIRED_CODES:
        return True
    return RingCentralErrorCode.TOKEN_EXPIRED.value in error_message
