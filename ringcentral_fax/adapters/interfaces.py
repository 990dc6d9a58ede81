"""Typed interfaces for adapter-layer responsibilities."""

from os import PathLike
from typing import Any, Callable, Protocol, Sequence, Union

from ringcentral_fax.domain import FaxAttachment, FaxRequest, TokenSet

TokenRefreshListener = Callable[[TokenSet], None]
FaxFileInput = Union[FaxAttachment, str, PathLike]


class FaxSenderPort(Protocol):
    """Port definition for sending faxes through an upstream provider."""

    def adapter_source_name(self) -> str:
        """Return adapter source identifier for diagnostics and telemetry.

        Returns:
            str: Human-readable upstream source identifier.
        """

    def adapter_send(self, to: str | None, files: Sequence[FaxFileInput] | None, text: str | None = None) -> Any:
        """Send one fax built from a destination, files and optional cover text.

        Args:
            to: Destination phone number.
            files: Attachments or filesystem paths, in send order.
            text: Optional cover page text.

        Returns:
            Any: Parsed upstream response body, unmodified.

        Raises:
            ValueError: Raised when `to` or `files` is missing.
            ConnectionError: Raised when upstream communication fails.
            PermissionError: Raised when re-authentication is required.
        """

    def adapter_send_fax(self, request: FaxRequest) -> Any:
        """Send one prepared fax request.

        Args:
            request: Immutable fax request.

        Returns:
            Any: Parsed upstream response body, unmodified.

        Raises:
            ValueError: Raised when the request is malformed.
            ConnectionError: Raised when upstream communication fails.
            PermissionError: Raised when re-authentication is required.
        """


class OAuthFlowPort(Protocol):
    """Port definition for the OAuth authorization-code flow."""

    def adapter_authorization_url(self, state: str | None = None) -> str:
        """Return the upstream login URL for the authorization-code flow."""

    def adapter_handle_oauth_callback(self, code: str) -> TokenSet:
        """Exchange an authorization code and install the issued tokens."""
