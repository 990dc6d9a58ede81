"""RingCentral fax adapter with credential resolution and retry-on-expiry policy."""

from __future__ import annotations

import logging
import mimetypes
import threading
import time
from os import PathLike
from pathlib import Path
from typing import Any, Callable, Final, Iterable, Sequence

from ringcentral_fax.domain import FaxAttachment, FaxRequest, TokenSet

from .credentials import (
    AuthorizationCodeCredential,
    ClientIdentity,
    JwtCredential,
    PasswordCredential,
    PrivateKeyCredential,
    RingCentralCredential,
    TokenPairCredential,
)
from .interfaces import FaxFileInput, FaxSenderPort, OAuthFlowPort, TokenRefreshListener
from .jwt_assertion import jwt_build_private_key_assertion
from .ringcentral_errors import (
    RingCentralApiError,
    RingCentralAuthError,
    RingCentralAuthExhaustedError,
    RingCentralAuthExpiredError,
    RingCentralConfigurationError,
    RingCentralValidationError,
)
from .ringcentral_platform import RingCentralPlatformClient

logger = logging.getLogger(__name__)

_CREDENTIAL_TYPES: Final[tuple[type, ...]] = (
    TokenPairCredential,
    JwtCredential,
    PrivateKeyCredential,
    PasswordCredential,
    AuthorizationCodeCredential,
)


class RingCentralFaxAdapter(FaxSenderPort, OAuthFlowPort):
    """Adapter for the RingCentral fax endpoint.

    Construction validates configuration only; tokens are obtained on
    `adapter_authenticate` or lazily on the first send. The session token is
    guarded by a lock so concurrent refreshes never interleave.
    """

    FAX_PATH: Final[str] = "/restapi/v1.0/account/~/extension/~/fax"
    _FAX_RESOLUTION: Final[str] = "High"
    _COVER_PAGE_FILE_NAME: Final[str] = "cover.txt"

    def __init__(
        self,
        identity: ClientIdentity,
        credential: RingCentralCredential,
        platform_client: RingCentralPlatformClient | None = None,
        app_name: str = "ringcentral-fax/1.0",
        request_timeout_seconds: float = 30.0,
        jwt_token_provider: Callable[[], str] | None = None,
        token_refresh_listeners: Iterable[TokenRefreshListener] = (),
        clock: Callable[[], float] = time.time,
    ):
        """Initialize RingCentral fax adapter.

        Args:
            identity: Registered application identity.
            credential: Active credential shape.
            platform_client: Optional platform client; built from identity when omitted.
            app_name: User-Agent product token for the default platform client.
            request_timeout_seconds: HTTP timeout for the default platform client.
            jwt_token_provider: Optional callable supplying a fresh JWT on regeneration.
            token_refresh_listeners: Callables notified with every newly issued token set.
            clock: Time source used for private-key assertions.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RingCentralConfigurationError: Raised when identity or credential fields are missing.
        """

        if not isinstance(credential, _CREDENTIAL_TYPES):
            raise RingCentralConfigurationError("RingCentral credential shape is not supported")

        self._identity = identity.identity_validate()
        self._credential = credential.credential_validate()
        if isinstance(self._credential, AuthorizationCodeCredential):
            self._redirect_url: str | None = self._credential.redirect_url
        else:
            self._redirect_url = self._identity.redirect_url

        self._platform = platform_client or RingCentralPlatformClient(
            client_id=self._identity.client_id,
            client_secret=self._identity.client_secret,
            server_url=self._identity.server_url,
            app_name=app_name,
            request_timeout_seconds=request_timeout_seconds,
        )
        self._jwt_token_provider = jwt_token_provider
        self._token_refresh_listeners: list[TokenRefreshListener] = list(token_refresh_listeners)
        self._clock = clock
        self._token_lock = threading.Lock()
        self._authenticate_lock = threading.Lock()
        self._token_set: TokenSet | None = None

    def adapter_source_name(self) -> str:
        return "ringcentral_fax"

    def adapter_add_token_refresh_listener(self, listener: TokenRefreshListener) -> None:
        """Register a callable notified with every newly issued token set."""

        self._token_refresh_listeners.append(listener)

    def adapter_restore_token(self, token_set: TokenSet) -> None:
        """Install previously persisted token material as the active session."""

        with self._token_lock:
            self._token_set = token_set

    def adapter_current_token(self) -> TokenSet | None:
        """Return the active session token set, if any."""

        with self._token_lock:
            return self._token_set

    def adapter_authenticate(self) -> TokenSet:
        """Obtain a session token for the active credential shape.

        Returns:
            TokenSet: Installed session token set.

        Raises:
            RingCentralAuthError: Raised when the token endpoint rejects the credential.
            RingCentralAuthExhaustedError: Raised when the authorization-code flow has not completed.
            RingCentralTransportError: Raised for network failures.
        """

        credential = self._credential
        if isinstance(credential, TokenPairCredential):
            token_set = TokenSet(access_token=credential.access_token, refresh_token=credential.refresh_token)
            issued = False
        elif isinstance(credential, JwtCredential):
            token_set = self._platform.platform_token_jwt(credential.jwt_token)
            issued = True
        elif isinstance(credential, PrivateKeyCredential):
            token_set = self._platform.platform_token_jwt(self._adapter_build_assertion(credential))
            issued = True
        elif isinstance(credential, PasswordCredential):
            token_set = self._platform.platform_token_password(
                username=credential.username,
                password=credential.password,
                extension=credential.extension,
            )
            issued = True
        else:
            raise RingCentralAuthExhaustedError(
                "RingCentral authorization required: complete the OAuth authorization-code flow first"
            )

        with self._token_lock:
            self._token_set = token_set
        logger.info("RingCentral session authenticated", extra={"credential_kind": credential.kind.value})
        if issued:
            self._adapter_notify_listeners(token_set)
        return token_set

    def adapter_authorization_url(self, state: str | None = None) -> str:
        """Return the RingCentral login URL for the authorization-code flow.

        Args:
            state: Optional opaque value echoed back to the redirect URL.

        Returns:
            str: Authorization URL.

        Raises:
            RingCentralConfigurationError: Raised when no redirect URL is configured.
        """

        return self._platform.platform_authorization_url(redirect_url=self._adapter_require_redirect_url(), state=state)

    def adapter_handle_oauth_callback(self, code: str) -> TokenSet:
        """Exchange an authorization code and install the issued token set.

        Args:
            code: Authorization code received on the redirect URL.

        Returns:
            TokenSet: Issued access and refresh tokens.

        Raises:
            RingCentralValidationError: Raised when the code is blank.
            RingCentralConfigurationError: Raised when no redirect URL is configured.
            RingCentralAuthError: Raised when the token endpoint rejects the code.
        """

        normalized_code = (code or "").strip()
        if not normalized_code:
            raise RingCentralValidationError("OAuth authorization code must not be blank")

        token_set = self._platform.platform_token_authorization_code(
            code=normalized_code,
            redirect_url=self._adapter_require_redirect_url(),
        )
        with self._token_lock:
            self._token_set = token_set
        self._adapter_notify_listeners(token_set)
        return token_set

    def adapter_send(self, to: str | None, files: Sequence[FaxFileInput] | None, text: str | None = None) -> Any:
        """Send one fax from a destination number, files and optional cover text.

        Args:
            to: Destination phone number.
            files: `FaxAttachment` values or filesystem paths, in send order.
            text: Optional cover page text.

        Returns:
            Any: Parsed RingCentral response body, unmodified.

        Raises:
            RingCentralValidationError: Raised when `to` or `files` is missing or a path is unreadable.
        """

        normalized_to = (to or "").strip()
        if not normalized_to or files is None:
            raise RingCentralValidationError('Both "to" and "files" parameters are required')

        attachments = tuple(_adapter_coerce_attachment(file_input) for file_input in files)
        return self.adapter_send_fax(FaxRequest(to=normalized_to, attachments=attachments, cover_page_text=text))

    def adapter_send_fax(self, request: FaxRequest) -> Any:
        """Send one fax, refreshing the session token at most once on expiry.

        Args:
            request: Immutable fax request; reused unchanged for the retry.

        Returns:
            Any: Parsed RingCentral response body, unmodified.

        Raises:
            RingCentralValidationError: Raised when the request is malformed.
            RingCentralAuthExhaustedError: Raised when re-authentication is required.
            RingCentralApiError: Raised for non-auth upstream rejections.
            RingCentralTransportError: Raised for network failures.
            RingCentralTimeoutError: Raised when the request timed out.
        """

        self._adapter_validate_request(request)
        request_payload, files = self._adapter_build_fax_parts(request)

        token_set = self._adapter_session_token()
        try:
            response_body = self._platform.platform_post_multipart(
                path=self.FAX_PATH,
                access_token=token_set.access_token,
                request_payload=request_payload,
                files=files,
            )
        except RingCentralAuthExpiredError as error:
            logger.warning(
                "RingCentral access token expired; refreshing once",
                extra={"error_code": error.error_code},
            )
            token_set = self._adapter_refresh_after_expiry(stale_token=token_set)
        else:
            logger.info("RingCentral fax sent", extra={"attempt": 1})
            return response_body

        try:
            response_body = self._platform.platform_post_multipart(
                path=self.FAX_PATH,
                access_token=token_set.access_token,
                request_payload=request_payload,
                files=files,
            )
        except RingCentralAuthExpiredError as error:
            raise RingCentralAuthExhaustedError(
                "RingCentral access token rejected after refresh; re-authentication required",
                error_code=error.error_code,
                status_code=error.status_code,
                response_payload=error.response_payload,
            ) from error
        logger.info("RingCentral fax sent", extra={"attempt": 2})
        return response_body

    def adapter_close(self) -> None:
        """Release the underlying HTTP client."""

        self._platform.platform_close()

    def _adapter_session_token(self) -> TokenSet:
        """Return the session token, authenticating once when none is installed.

        Concurrent first sends wait on `_authenticate_lock`; only the first one
        issues a grant and the rest reuse the installed token.
        """

        token_set = self.adapter_current_token()
        if token_set is not None:
            return token_set
        with self._authenticate_lock:
            return self.adapter_current_token() or self.adapter_authenticate()

    def _adapter_refresh_after_expiry(self, stale_token: TokenSet) -> TokenSet:
        """Replace the expired session token exactly once.

        A caller whose stale token was already replaced by a concurrent refresh
        reuses the current token instead of refreshing again.

        Args:
            stale_token: Token set rejected by the API.

        Returns:
            TokenSet: Token set to use for the single resend.

        Raises:
            RingCentralAuthExhaustedError: Raised when no refresh mechanism exists or refresh fails.
        """

        with self._token_lock:
            current_token = self._token_set
            if current_token is not None and current_token.access_token != stale_token.access_token:
                return current_token
            try:
                renewed_token = self._adapter_renew_token(stale_token)
            except RingCentralAuthExhaustedError:
                raise
            except (RingCentralAuthError, RingCentralApiError, RingCentralConfigurationError) as error:
                raise RingCentralAuthExhaustedError(
                    f"Failed to refresh token: {error}",
                    error_code=error.error_code,
                    status_code=error.status_code,
                    response_payload=error.response_payload,
                ) from error
            self._token_set = renewed_token

        self._adapter_notify_listeners(renewed_token)
        return renewed_token

    def _adapter_renew_token(self, stale_token: TokenSet) -> TokenSet:
        credential = self._credential
        if isinstance(credential, JwtCredential):
            return self._platform.platform_token_jwt(self._adapter_regenerate_jwt(credential))
        if isinstance(credential, PrivateKeyCredential):
            return self._platform.platform_token_jwt(self._adapter_build_assertion(credential))
        if stale_token.refresh_token:
            return self._platform.platform_token_refresh(stale_token.refresh_token)
        raise RingCentralAuthExhaustedError(
            "RingCentral session has no refresh token; re-authentication required"
        )

    def _adapter_regenerate_jwt(self, credential: JwtCredential) -> str:
        if self._jwt_token_provider is None:
            return credential.jwt_token
        fresh_jwt = (self._jwt_token_provider() or "").strip()
        if not fresh_jwt:
            raise RingCentralConfigurationError("RingCentral JWT token provider returned a blank token")
        return fresh_jwt

    def _adapter_build_assertion(self, credential: PrivateKeyCredential) -> str:
        return jwt_build_private_key_assertion(
            client_id=self._identity.client_id,
            server_url=self._identity.server_url,
            private_key=credential.private_key,
            key_id=credential.key_id,
            clock=self._clock,
        )

    def _adapter_require_redirect_url(self) -> str:
        if not self._redirect_url:
            raise RingCentralConfigurationError("RingCentral Redirect URL must be set for the authorization-code flow")
        return self._redirect_url

    def _adapter_notify_listeners(self, token_set: TokenSet) -> None:
        for listener in list(self._token_refresh_listeners):
            listener(token_set)

    def _adapter_validate_request(self, request: FaxRequest) -> None:
        if not (request.to or "").strip():
            raise RingCentralValidationError('Fax destination "to" must not be blank')
        if not request.attachments:
            raise RingCentralValidationError("Fax request must contain at least one file")
        for attachment in request.attachments:
            if not attachment.file_name.strip():
                raise RingCentralValidationError("Fax attachment file_name must not be blank")

    def _adapter_build_fax_parts(
        self,
        request: FaxRequest,
    ) -> tuple[dict[str, Any], list[tuple[str, tuple[str, bytes, str]]]]:
        """Build JSON body and ordered multipart file parts for one fax.

        Args:
            request: Validated fax request.

        Returns:
            tuple: JSON request part and file parts (attachments, then cover text).
        """

        request_payload = {
            "to": [{"phoneNumber": request.to.strip()}],
            "faxResolution": self._FAX_RESOLUTION,
        }
        files = [
            ("attachment", (attachment.file_name, attachment.content, attachment.content_type))
            for attachment in request.attachments
        ]
        if request.cover_page_text:
            files.append(
                ("attachment", (self._COVER_PAGE_FILE_NAME, request.cover_page_text.encode("utf-8"), "text/plain"))
            )
        return request_payload, files


def _adapter_coerce_attachment(file_input: FaxFileInput) -> FaxAttachment:
    if isinstance(file_input, FaxAttachment):
        return file_input
    if not isinstance(file_input, (str, PathLike)):
        raise RingCentralValidationError(f"Unsupported fax file input type: {type(file_input).__name__}")

    file_path = Path(file_input)
    try:
        content = file_path.read_bytes()
    except OSError as error:
        raise RingCentralValidationError(f"Fax file could not be read: {file_path}") from error
    content_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
    return FaxAttachment(file_name=file_path.name, content=content, content_type=content_type)
