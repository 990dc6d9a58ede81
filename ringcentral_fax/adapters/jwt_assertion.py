"""Signed JWT assertion builder for the private-key credential shape."""

from __future__ import annotations

import time
from typing import Callable, Final

import jwt

from .ringcentral_errors import RingCentralConfigurationError

JWT_ASSERTION_LIFETIME_SECONDS: Final[int] = 3600
JWT_ASSERTION_ALGORITHM: Final[str] = "RS256"


def jwt_build_private_key_assertion(
    client_id: str,
    server_url: str,
    private_key: str,
    key_id: str | None = None,
    clock: Callable[[], float] = time.time,
    lifetime_seconds: int = JWT_ASSERTION_LIFETIME_SECONDS,
) -> str:
    """Sign a time-boxed JWT assertion with the configured RSA private key.

    Issuer and subject are the client id; audience is the server URL.

    Args:
        client_id: RingCentral application client id.
        server_url: RingCentral platform base URL.
        private_key: PEM-encoded RSA private key.
        key_id: Optional `kid` header value.
        clock: Time source returning epoch seconds.
        lifetime_seconds: Assertion lifetime added to the issue time.

    Returns:
        str: Encoded compact JWT.

    Raises:
        RingCentralConfigurationError: Raised when the key cannot sign the assertion.
    """

    if lifetime_seconds <= 0:
        raise ValueError("lifetime_seconds must be > 0")

    issued_at = int(clock())
    claims = {
        "iss": client_id,
        "sub": client_id,
        "aud": server_url,
        "iat": issued_at,
        "exp": issued_at + lifetime_seconds,
    }
    headers = {"kid": key_id} if key_id else None

    try:
        return jwt.encode(claims, private_key, algorithm=JWT_ASSERTION_ALGORITHM, headers=headers)
    except (jwt.PyJWTError, ValueError, TypeError) as error:
        raise RingCentralConfigurationError(f"RingCentral private key could not sign JWT assertion: {error}") from error
