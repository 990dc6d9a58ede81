"""Typed domain models shared across runtime layers.

This module provides immutable data contracts for fax requests and OAuth token
material exchanged between the adapter, persistence and API layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class FaxAttachment:
    """One file part uploaded with an outbound fax.

    Attributes:
        file_name: File name reported to the upstream API.
        content: Immutable file bytes.
        content_type: MIME type of the file part.
    """

    file_name: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True)
class FaxRequest:
    """Outbound fax request contract.

    Attributes:
        to: Destination phone number.
        attachments: Ordered file attachments.
        cover_page_text: Optional cover page text appended after attachments.
    """

    to: str
    attachments: tuple[FaxAttachment, ...]
    cover_page_text: str | None = None


@dataclass(frozen=True)
class TokenSet:
    """OAuth token material issued by the RingCentral token endpoint.

    Attributes:
        access_token: Bearer token sent on each API call.
        refresh_token: Optional refresh token used for token renewal.
        token_type: Token type reported by upstream.
        expires_in: Access token lifetime in seconds.
        refresh_token_expires_in: Refresh token lifetime in seconds.
        scope: Granted scope list as reported by upstream.
        owner_id: Upstream extension identifier owning the token.
    """

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    refresh_token_expires_in: int | None = None
    scope: str | None = None
    owner_id: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TokenSet:
        """Build token set from a token endpoint JSON payload.

        Args:
            payload: Parsed token endpoint response body.

        Returns:
            TokenSet: Normalized token set.

        Raises:
            ValueError: Raised when payload has no access token.
        """

        access_token = str(payload.get("access_token") or "").strip()
        if not access_token:
            raise ValueError("token payload is missing access_token")

        refresh_token = str(payload.get("refresh_token") or "").strip() or None
        owner_id = payload.get("owner_id")
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            token_type=str(payload.get("token_type") or "bearer"),
            expires_in=_domain_optional_int(payload.get("expires_in")),
            refresh_token_expires_in=_domain_optional_int(payload.get("refresh_token_expires_in")),
            scope=payload.get("scope"),
            owner_id=str(owner_id) if owner_id is not None else None,
        )

    def to_payload(self) -> dict[str, Any]:
        """Return token set as a JSON-compatible mapping.

        Returns:
            dict[str, Any]: Token payload using upstream field names.
        """

        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
            "expires_in": self.expires_in,
            "refresh_token_expires_in": self.refresh_token_expires_in,
            "scope": self.scope,
            "owner_id": self.owner_id,
        }


def _domain_optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)
