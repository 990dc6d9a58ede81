"""Application bootstrap wiring for startup validation and dependency assembly."""

from functools import partial

from fastapi import FastAPI

from ringcentral_fax.adapters import (
    ClientIdentity,
    RingCentralCredential,
    RingCentralFaxAdapter,
    credential_from_fields,
)
from ringcentral_fax.api import create_api_application
from ringcentral_fax.config import AppSettings, config_load_settings
from ringcentral_fax.db import (
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyTokenStoreService,
    TokenStorePort,
    db_create_engine,
)


def bootstrap_build_credential(settings: AppSettings) -> RingCentralCredential:
    """Select the active credential shape from validated settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        RingCentralCredential: Validated credential shape.

    Raises:
        RingCentralConfigurationError: Raised when credential fields are incomplete.
    """

    return credential_from_fields(
        auth_mode=settings.ringcentral_auth_mode,
        access_token=settings.ringcentral_access_token,
        refresh_token=settings.ringcentral_refresh_token,
        jwt_token=settings.ringcentral_jwt_token,
        private_key=settings.ringcentral_private_key,
        private_key_id=settings.ringcentral_private_key_id,
        username=settings.ringcentral_username,
        extension=settings.ringcentral_extension,
        password=settings.ringcentral_password,
        redirect_url=settings.ringcentral_redirect_url,
    )


def bootstrap_create_fax_adapter(
    settings: AppSettings,
    token_store: TokenStorePort | None = None,
) -> RingCentralFaxAdapter:
    """Build the fax adapter and attach optional token persistence.

    When a token store is given, a stored token set seeds the session and every
    newly issued token set is written back.

    Args:
        settings: Validated runtime settings.
        token_store: Optional token persistence port.

    Returns:
        RingCentralFaxAdapter: Configured adapter; no network call has been made.

    Raises:
        RingCentralConfigurationError: Raised when RingCentral configuration is incomplete.
        RuntimeError: Raised when the stored token cannot be read.
    """

    identity = ClientIdentity(
        client_id=settings.ringcentral_client_id,
        client_secret=settings.ringcentral_client_secret,
        server_url=settings.ringcentral_server_url,
        redirect_url=settings.ringcentral_redirect_url,
    )
    fax_adapter = RingCentralFaxAdapter(
        identity=identity,
        credential=bootstrap_build_credential(settings),
        app_name=settings.ringcentral_app_name,
        request_timeout_seconds=settings.ringcentral_request_timeout_seconds,
    )
    if token_store is None:
        return fax_adapter

    stored_token = token_store.db_token_load(settings.ringcentral_client_id)
    if stored_token is not None:
        fax_adapter.adapter_restore_token(stored_token)
    fax_adapter.adapter_add_token_refresh_listener(partial(token_store.db_token_save, settings.ringcentral_client_id))
    return fax_adapter


def bootstrap_create_runtime(settings: AppSettings | None = None) -> tuple[AppSettings, RingCentralFaxAdapter]:
    """Load settings and build the token-store-aware fax adapter.

    Args:
        settings: Optional preloaded settings.

    Returns:
        tuple[AppSettings, RingCentralFaxAdapter]: Settings and wired adapter.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    token_store = None
    if resolved_settings.database_url:
        token_store = SQLAlchemyTokenStoreService(engine=db_create_engine(database_url=resolved_settings.database_url))
    return resolved_settings, bootstrap_create_fax_adapter(resolved_settings, token_store=token_store)


def bootstrap_create_application() -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        RingCentralConfigurationError: Raised when RingCentral configuration is incomplete.
    """

    settings = config_load_settings()
    db_health_service = None
    token_store = None
    if settings.database_url:
        engine = db_create_engine(database_url=settings.database_url)
        db_health_service = SQLAlchemyDatabaseHealthService(engine=engine)
        token_store = SQLAlchemyTokenStoreService(engine=engine)

    fax_adapter = bootstrap_create_fax_adapter(settings, token_store=token_store)
    return create_api_application(
        settings=settings,
        fax_sender=fax_adapter,
        oauth_flow=fax_adapter,
        db_health_service=db_health_service,
    )
