"""Project-native typed exceptions for RingCentral adapter failures."""

from __future__ import annotations

from typing import Any


class RingCentralFaxError(Exception):
    """Base exception for adapter-level RingCentral failures.

    Attributes:
        error_code: Optional upstream error code.
        status_code: Optional upstream HTTP status code.
        response_payload: Optional parsed upstream error body.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        response_payload: Any = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code
        self.response_payload = response_payload


class RingCentralConfigurationError(RingCentralFaxError, ValueError):
    """Required configuration is missing or invalid."""


class RingCentralValidationError(RingCentralFaxError, ValueError):
    """Caller input for a fax or OAuth operation is malformed."""


class RingCentralTransportError(RingCentralFaxError, ConnectionError):
    """Transport-level connectivity failure during RingCentral API communication."""


class RingCentralTimeoutError(RingCentralFaxError, TimeoutError):
    """Transport timeout while waiting for RingCentral API response."""


class RingCentralApiError(RingCentralTransportError):
    """Non-success upstream response unrelated to token lifecycle."""


class RingCentralAuthError(RingCentralFaxError, PermissionError):
    """Token lifecycle failure reported by the token endpoint or API."""


class RingCentralAuthExpiredError(RingCentralAuthError):
    """Access token expired; eligible for one refresh and resend."""


class RingCentralAuthExhaustedError(RingCentralAuthError):
    """Refresh capability is exhausted; re-authentication is required out of band."""
