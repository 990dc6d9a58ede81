"""Adapter layer package for RingCentral integration boundaries."""

from .credentials import (
	AuthorizationCodeCredential,
	ClientIdentity,
	CredentialKind,
	JwtCredential,
	PasswordCredential,
	PrivateKeyCredential,
	RingCentralCredential,
	TokenPairCredential,
	credential_from_fields,
)
from .interfaces import FaxSenderPort, OAuthFlowPort, TokenRefreshListener
from .ringcentral_errors import (
	RingCentralApiError,
	RingCentralAuthError,
	RingCentralAuthExhaustedError,
	RingCentralAuthExpiredError,
	RingCentralConfigurationError,
	RingCentralFaxError,
	RingCentralTimeoutError,
	RingCentralTransportError,
	RingCentralValidationError,
)
from .ringcentral_fax import RingCentralFaxAdapter
from .ringcentral_platform import RingCentralPlatformClient

__all__ = [
	"AuthorizationCodeCredential",
	"ClientIdentity",
	"CredentialKind",
	"FaxSenderPort",
	"JwtCredential",
	"OAuthFlowPort",
	"PasswordCredential",
	"PrivateKeyCredential",
	"RingCentralApiError",
	"RingCentralAuthError",
	"RingCentralAuthExhaustedError",
	"RingCentralAuthExpiredError",
	"RingCentralConfigurationError",
	"RingCentralCredential",
	"RingCentralFaxAdapter",
	"RingCentralFaxError",
	"RingCentralPlatformClient",
	"RingCentralTimeoutError",
	"RingCentralTransportError",
	"RingCentralValidationError",
	"TokenPairCredential",
	"TokenRefreshListener",
	"credential_from_fields",
]
