"""RingCentral platform HTTP client for OAuth token grants and REST calls."""

from __future__ import annotations

import json
import logging
from typing import Any, Final, Sequence
from urllib.parse import urlencode

import httpx

from ringcentral_fax.domain import TokenSet

from .ringcentral_error_codes import (
    ringcentral_error_is_refresh_exhausted,
    ringcentral_error_is_token_expired,
    ringcentral_extract_error,
)
from .ringcentral_errors import (
    RingCentralApiError,
    RingCentralAuthError,
    RingCentralAuthExhaustedError,
    RingCentralAuthExpiredError,
    RingCentralFaxError,
    RingCentralTimeoutError,
    RingCentralTransportError,
)

logger = logging.getLogger(__name__)

MultipartFiles = Sequence[tuple[str, tuple[str, bytes, str]]]


class RingCentralPlatformClient:
    """Thin client over one pooled `httpx.Client` bound to a RingCentral server."""

    TOKEN_PATH: Final[str] = "/restapi/oauth/token"
    AUTHORIZE_PATH: Final[str] = "/restapi/oauth/authorize"
    _JWT_BEARER_GRANT: Final[str] = "urn:ietf:params:oauth:grant-type:jwt-bearer"
    _TOKEN_REJECTION_STATUSES: Final[frozenset[int]] = frozenset({400, 401, 403})

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        server_url: str,
        app_name: str = "ringcentral-fax/1.0",
        request_timeout_seconds: float = 30.0,
        http_client: httpx.Client | None = None,
    ):
        """Initialize platform client.

        Args:
            client_id: RingCentral application client id.
            client_secret: RingCentral application client secret.
            server_url: RingCentral platform base URL.
            app_name: User-Agent product token.
            request_timeout_seconds: HTTP request timeout in seconds.
            http_client: Optional preconfigured client, mainly for tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_server_url = server_url.strip().rstrip("/")
        if not client_id.strip():
            raise ValueError("client_id must not be blank")
        if not client_secret.strip():
            raise ValueError("client_secret must not be blank")
        if not normalized_server_url:
            raise ValueError("server_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._client_id = client_id.strip()
        self._client_secret = client_secret.strip()
        self._server_url = normalized_server_url
        self._http_client = http_client or httpx.Client(
            base_url=normalized_server_url,
            timeout=request_timeout_seconds,
            headers={"User-Agent": app_name},
        )

    @property
    def server_url(self) -> str:
        return self._server_url

    def platform_authorization_url(self, redirect_url: str, state: str | None = None) -> str:
        """Build the OAuth authorization-code login URL.

        Args:
            redirect_url: Registered redirect URL receiving the authorization code.
            state: Optional opaque state echoed back to the redirect URL.

        Returns:
            str: Absolute authorization URL.
        """

        query_parameters = {
            "response_type": "code",
            "client_id": self._client_id,
            "redirect_uri": redirect_url,
        }
        if state:
            query_parameters["state"] = state
        return f"{self._server_url}{self.AUTHORIZE_PATH}?{urlencode(query_parameters)}"

    def platform_token_password(self, username: str, password: str, extension: str | None = None) -> TokenSet:
        """Exchange resource-owner credentials via the `password` grant."""

        form_data = {"grant_type": "password", "username": username, "password": password}
        if extension:
            form_data["extension"] = extension
        return self._platform_request_token(form_data=form_data, renewal_grant=False)

    def platform_token_jwt(self, assertion: str) -> TokenSet:
        """Exchange a JWT via the JWT bearer grant."""

        form_data = {"grant_type": self._JWT_BEARER_GRANT, "assertion": assertion}
        return self._platform_request_token(form_data=form_data, renewal_grant=True)

    def platform_token_refresh(self, refresh_token: str) -> TokenSet:
        """Exchange a refresh token for a new token set."""

        form_data = {"grant_type": "refresh_token", "refresh_token": refresh_token}
        return self._platform_request_token(form_data=form_data, renewal_grant=True)

    def platform_token_authorization_code(self, code: str, redirect_url: str) -> TokenSet:
        """Exchange an OAuth authorization code for a token set."""

        form_data = {"grant_type": "authorization_code", "code": code, "redirect_uri": redirect_url}
        return self._platform_request_token(form_data=form_data, renewal_grant=False)

    def platform_post_multipart(
        self,
        path: str,
        access_token: str,
        request_payload: dict[str, Any],
        files: MultipartFiles,
    ) -> Any:
        """POST one authorized multipart request and return the parsed JSON body.

        Args:
            path: API path relative to the server URL.
            access_token: Bearer token for the Authorization header.
            request_payload: JSON part sent ahead of the file parts.
            files: Ordered multipart file parts.

        Returns:
            Any: Parsed JSON response body.

        Raises:
            RingCentralAuthExpiredError: Raised when the access token was rejected.
            RingCentralAuthExhaustedError: Raised when upstream signals refresh exhaustion.
            RingCentralApiError: Raised for other non-success responses or invalid JSON.
            RingCentralTransportError: Raised for network failures.
            RingCentralTimeoutError: Raised when the request timed out.
        """

        response = self._platform_send(
            method="POST",
            path=path,
            token_endpoint=False,
            renewal_grant=False,
            files=[("json", ("request.json", _platform_json_dumps(request_payload), "application/json")), *files],
            headers={"Authorization": f"Bearer {access_token}"},
        )
        try:
            return response.json()
        except ValueError as error:
            raise RingCentralApiError(
                "RingCentral response body is not valid JSON",
                status_code=response.status_code,
            ) from error

    def platform_close(self) -> None:
        """Release pooled HTTP connections."""

        self._http_client.close()

    def _platform_request_token(self, form_data: dict[str, str], renewal_grant: bool) -> TokenSet:
        response = self._platform_send(
            method="POST",
            path=self.TOKEN_PATH,
            token_endpoint=True,
            renewal_grant=renewal_grant,
            data=form_data,
            auth=(self._client_id, self._client_secret),
        )
        try:
            token_set = TokenSet.from_payload(response.json())
        except (ValueError, TypeError, AttributeError) as error:
            raise RingCentralApiError(
                "RingCentral token response is missing token material",
                status_code=response.status_code,
            ) from error
        logger.info("RingCentral token issued", extra={"grant_type": form_data["grant_type"]})
        return token_set

    def _platform_send(
        self,
        method: str,
        path: str,
        token_endpoint: bool,
        renewal_grant: bool,
        **request_options: Any,
    ) -> httpx.Response:
        try:
            response = self._http_client.request(method, path, **request_options)
        except httpx.TimeoutException as error:
            raise RingCentralTimeoutError("RingCentral transport request timed out") from error
        except httpx.TransportError as error:
            raise RingCentralTransportError("RingCentral transport request failed") from error

        if response.is_success:
            return response
        raise self._platform_map_error_response(
            response=response,
            token_endpoint=token_endpoint,
            renewal_grant=renewal_grant,
        )

    def _platform_map_error_response(
        self,
        response: httpx.Response,
        token_endpoint: bool,
        renewal_grant: bool,
    ) -> RingCentralFaxError:
        """Translate one non-success response into the adapter error taxonomy.

        Args:
            response: Upstream HTTP response.
            token_endpoint: Whether the request targeted the token endpoint.
            renewal_grant: Whether the request was a refresh or JWT renewal grant.

        Returns:
            RingCentralFaxError: Typed error for the caller to raise.
        """

        try:
            payload = response.json()
        except ValueError:
            payload = None

        status_code = response.status_code
        error_code, error_message = ringcentral_extract_error(payload, fallback_message=f"HTTP {status_code}")
        error_options = {"error_code": error_code, "status_code": status_code, "response_payload": payload}
        detail = f"status={status_code}, code={error_code}, message={error_message}"

        if ringcentral_error_is_refresh_exhausted(error_code, error_message, token_grant=renewal_grant):
            return RingCentralAuthExhaustedError(f"RingCentral re-authentication required: {detail}", **error_options)
        if token_endpoint:
            if status_code in self._TOKEN_REJECTION_STATUSES:
                return RingCentralAuthError(f"RingCentral authentication failed: {detail}", **error_options)
            return RingCentralApiError(f"RingCentral token request failed: {detail}", **error_options)
        if ringcentral_error_is_token_expired(status_code, error_code, error_message):
            return RingCentralAuthExpiredError(f"RingCentral access token expired: {detail}", **error_options)
        return RingCentralApiError(f"RingCentral request rejected: {detail}", **error_options)


def _platform_json_dumps(payload: dict[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")
