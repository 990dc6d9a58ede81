"""Credential shapes accepted by the RingCentral adapter.

Exactly one shape is active per adapter instance. Each shape validates its own
required fields so that configuration mistakes surface at construction time,
before any network call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from .ringcentral_errors import RingCentralConfigurationError

DEFAULT_SERVER_URL = "https://platform.ringcentral.com"


class CredentialKind(str, Enum):
    """Supported credential shapes."""

    TOKEN_PAIR = "token_pair"
    JWT = "jwt"
    PRIVATE_KEY = "private_key"
    PASSWORD = "password"
    AUTHORIZATION_CODE = "authorization_code"


def _credential_require(field_label: str, value: str | None) -> str:
    normalized_value = (value or "").strip()
    if not normalized_value:
        raise RingCentralConfigurationError(f"RingCentral {field_label} must be set")
    return normalized_value


@dataclass(frozen=True)
class ClientIdentity:
    """Registered RingCentral application identity.

    Attributes:
        client_id: Application client id.
        client_secret: Application client secret.
        server_url: RingCentral platform base URL.
        redirect_url: Optional OAuth redirect URL for the authorization-code flow.
    """

    client_id: str
    client_secret: str
    server_url: str = DEFAULT_SERVER_URL
    redirect_url: str | None = None

    def identity_validate(self) -> ClientIdentity:
        """Return a normalized copy or raise on missing fields.

        Returns:
            ClientIdentity: Identity with stripped values and no trailing slash on server URL.

        Raises:
            RingCentralConfigurationError: Raised when a required field is blank.
        """

        return ClientIdentity(
            client_id=_credential_require("Client ID", self.client_id),
            client_secret=_credential_require("Client Secret", self.client_secret),
            server_url=_credential_require("Server URL", self.server_url).rstrip("/"),
            redirect_url=(self.redirect_url or "").strip() or None,
        )


@dataclass(frozen=True)
class TokenPairCredential:
    """Pre-issued access and refresh token pair."""

    access_token: str
    refresh_token: str

    kind = CredentialKind.TOKEN_PAIR

    def credential_validate(self) -> TokenPairCredential:
        return TokenPairCredential(
            access_token=_credential_require("Access Token", self.access_token),
            refresh_token=_credential_require("Refresh Token", self.refresh_token),
        )


@dataclass(frozen=True)
class JwtCredential:
    """Pre-issued JWT exchanged through the JWT bearer grant."""

    jwt_token: str

    kind = CredentialKind.JWT

    def credential_validate(self) -> JwtCredential:
        return JwtCredential(jwt_token=_credential_require("JWT Token", self.jwt_token))


@dataclass(frozen=True)
class PrivateKeyCredential:
    """RSA private key used to sign a short-lived JWT assertion.

    Attributes:
        private_key: PEM-encoded RSA private key.
        key_id: Optional `kid` header value for key rotation.
    """

    private_key: str
    key_id: str | None = None

    kind = CredentialKind.PRIVATE_KEY

    def credential_validate(self) -> PrivateKeyCredential:
        return PrivateKeyCredential(
            private_key=_credential_require("Private Key", self.private_key),
            key_id=(self.key_id or "").strip() or None,
        )


@dataclass(frozen=True)
class PasswordCredential:
    """Resource-owner username, extension and password."""

    username: str
    password: str
    extension: str | None = None

    kind = CredentialKind.PASSWORD

    def credential_validate(self) -> PasswordCredential:
        return PasswordCredential(
            username=_credential_require("Username", self.username),
            password=_credential_require("Password", self.password),
            extension=(self.extension or "").strip() or None,
        )


@dataclass(frozen=True)
class AuthorizationCodeCredential:
    """Authorization-code flow; tokens arrive through the OAuth callback."""

    redirect_url: str

    kind = CredentialKind.AUTHORIZATION_CODE

    def credential_validate(self) -> AuthorizationCodeCredential:
        return AuthorizationCodeCredential(redirect_url=_credential_require("Redirect URL", self.redirect_url))


RingCentralCredential = Union[
    TokenPairCredential,
    JwtCredential,
    PrivateKeyCredential,
    PasswordCredential,
    AuthorizationCodeCredential,
]


def credential_from_fields(
    auth_mode: str | None = None,
    access_token: str | None = None,
    refresh_token: str | None = None,
    jwt_token: str | None = None,
    private_key: str | None = None,
    private_key_id: str | None = None,
    username: str | None = None,
    extension: str | None = None,
    password: str | None = None,
    redirect_url: str | None = None,
) -> RingCentralCredential:
    """Build the active credential shape from flat configuration fields.

    When `auth_mode` is unset the shape is inferred from populated fields in this
    order: token pair, JWT, private key, password, authorization code.

    Args:
        auth_mode: Optional explicit `CredentialKind` value.
        access_token: Access token for the token-pair shape.
        refresh_token: Refresh token for the token-pair shape.
        jwt_token: JWT for the JWT shape.
        private_key: PEM private key for the private-key shape.
        private_key_id: Optional key id for the private-key shape.
        username: Username for the password shape.
        extension: Optional extension for the password shape.
        password: Password for the password shape.
        redirect_url: Redirect URL for the authorization-code shape.

    Returns:
        RingCentralCredential: Validated credential shape.

    Raises:
        RingCentralConfigurationError: Raised when the mode is unknown, cannot be
            inferred, or the selected shape misses a required field.
    """

    normalized_mode = (auth_mode or "").strip().lower()
    if not normalized_mode:
        normalized_mode = _credential_infer_mode(
            access_token=access_token,
            jwt_token=jwt_token,
            private_key=private_key,
            username=username,
            redirect_url=redirect_url,
        )

    try:
        kind = CredentialKind(normalized_mode)
    except ValueError as error:
        allowed_modes = ", ".join(item.value for item in CredentialKind)
        raise RingCentralConfigurationError(
            f"Unsupported RingCentral auth mode '{normalized_mode}'; expected one of: {allowed_modes}"
        ) from error

    credential: RingCentralCredential
    if kind is CredentialKind.TOKEN_PAIR:
        credential = TokenPairCredential(access_token=access_token or "", refresh_token=refresh_token or "")
    elif kind is CredentialKind.JWT:
        credential = JwtCredential(jwt_token=jwt_token or "")
    elif kind is CredentialKind.PRIVATE_KEY:
        credential = PrivateKeyCredential(private_key=private_key or "", key_id=private_key_id)
    elif kind is CredentialKind.PASSWORD:
        credential = PasswordCredential(username=username or "", password=password or "", extension=extension)
    else:
        credential = AuthorizationCodeCredential(redirect_url=redirect_url or "")
    return credential.credential_validate()


def _credential_infer_mode(
    access_token: str | None,
    jwt_token: str | None,
    private_key: str | None,
    username: str | None,
    redirect_url: str | None,
) -> str:
    if (access_token or "").strip():
        return CredentialKind.TOKEN_PAIR.value
    if (jwt_token or "").strip():
        return CredentialKind.JWT.value
    if (private_key or "").strip():
        return CredentialKind.PRIVATE_KEY.value
    if (username or "").strip():
        return CredentialKind.PASSWORD.value
    if (redirect_url or "").strip():
        return CredentialKind.AUTHORIZATION_CODE.value
    raise RingCentralConfigurationError(
        "RingCentral credentials must be set: provide an access/refresh token pair, a JWT token, "
        "a private key, username/password, or a redirect URL"
    )
