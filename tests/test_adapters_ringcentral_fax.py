"""Regression tests for RingCentral fax adapter token lifecycle and retry policy."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Any

import pytest

from ringcentral_fax.adapters import (
    AuthorizationCodeCredential,
    ClientIdentity,
    JwtCredential,
    PasswordCredential,
    PrivateKeyCredential,
    RingCentralApiError,
    RingCentralAuthError,
    RingCentralAuthExhaustedError,
    RingCentralAuthExpiredError,
    RingCentralConfigurationError,
    RingCentralFaxAdapter,
    RingCentralTransportError,
    RingCentralValidationError,
    TokenPairCredential,
)
from ringcentral_fax.domain import FaxAttachment, FaxRequest, TokenSet

_IDENTITY = ClientIdentity(client_id="client-id", client_secret="client-secret")
_PDF = FaxAttachment(file_name="doc.pdf", content=b"%PDF-1.4", content_type="application/pdf")
_QUEUED_RESPONSE = {"id": 42, "messageStatus": "Queued"}


class _PlatformStub:
    """Record platform calls and replay scripted outcomes."""

    def __init__(self, send_outcomes: list[Any] | None = None):
        self.send_outcomes = list(send_outcomes or [_QUEUED_RESPONSE])
        self.sent_calls: list[dict[str, Any]] = []
        self.refresh_calls: list[str] = []
        self.jwt_calls: list[str] = []
        self.password_calls: list[tuple[str, str, str | None]] = []
        self.code_calls: list[tuple[str, str]] = []
        self.refresh_outcome: Any = TokenSet(access_token="access-2", refresh_token="refresh-2")
        self.closed = False

    def platform_post_multipart(self, path, access_token, request_payload, files):
        self.sent_calls.append(
            {"path": path, "access_token": access_token, "request_payload": request_payload, "files": files}
        )
        outcome = self.send_outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def platform_token_refresh(self, refresh_token):
        self.refresh_calls.append(refresh_token)
        if isinstance(self.refresh_outcome, Exception):
            raise self.refresh_outcome
        return self.refresh_outcome

    def platform_token_jwt(self, assertion):
        self.jwt_calls.append(assertion)
        return TokenSet(access_token=f"jwt-access-{len(self.jwt_calls)}")

    def platform_token_password(self, username, password, extension=None):
        self.password_calls.append((username, password, extension))
        return TokenSet(access_token="password-access")

    def platform_token_authorization_code(self, code, redirect_url):
        self.code_calls.append((code, redirect_url))
        return TokenSet(access_token="code-access", refresh_token="code-refresh")

    def platform_authorization_url(self, redirect_url, state=None):
        return f"https://platform.test/restapi/oauth/authorize?redirect_uri={redirect_url}&state={state}"

    def platform_close(self):
        self.closed = True


def _expired_error() -> RingCentralAuthExpiredError:
    return RingCentralAuthExpiredError(
        "RingCentral access token expired: status=401, code=TokenInvalid, message=Access token expired",
        error_code="TokenInvalid",
        status_code=401,
    )


def _build_adapter(
    platform_stub: _PlatformStub,
    credential: Any = None,
    **adapter_options: Any,
) -> RingCentralFaxAdapter:
    """Build adapter bound to the platform stub.

    Args:
        platform_stub: Recording platform stub.
        credential: Optional credential shape; token pair is used when omitted.
        **adapter_options: Extra adapter keyword arguments.

    Returns:
        RingCentralFaxAdapter: Adapter under test.
    """

    return RingCentralFaxAdapter(
        identity=_IDENTITY,
        credential=credential or TokenPairCredential(access_token="access-1", refresh_token="refresh-1"),
        platform_client=platform_stub,
        **adapter_options,
    )


@pytest.mark.parametrize(
    "credential",
    [
        TokenPairCredential(access_token="access", refresh_token=""),
        JwtCredential(jwt_token=" "),
        PasswordCredential(username="user", password=""),
    ],
)
def test_adapters_ringcentral_fax_incomplete_credential_fails_at_construction(credential: Any) -> None:
    """Reject incomplete credentials before any upstream call.

    Args:
        credential: Incomplete credential shape.

    Returns:
        None: Assertions validate fail-fast configuration handling.

    Raises:
        AssertionError: Raised when construction succeeds or calls upstream.
    """

    platform_stub = _PlatformStub()

    with pytest.raises(RingCentralConfigurationError, match="must be set"):
        _build_adapter(platform_stub, credential=credential)

    assert platform_stub.sent_calls == []
    assert platform_stub.refresh_calls == []


def test_adapters_ringcentral_fax_missing_client_id_fails_at_construction() -> None:
    """Reject blank client id before any upstream call."""

    with pytest.raises(RingCentralConfigurationError, match="Client ID"):
        RingCentralFaxAdapter(
            identity=ClientIdentity(client_id="", client_secret="secret"),
            credential=JwtCredential(jwt_token="jwt"),
            platform_client=_PlatformStub(),
        )


@pytest.mark.parametrize(
    ("to", "files"),
    [
        ("", [_PDF]),
        ("   ", [_PDF]),
        (None, [_PDF]),
        ("+15551234567", None),
    ],
)
def test_adapters_ringcentral_fax_send_requires_to_and_files(to: Any, files: Any) -> None:
    """Fail validation without any network call when `to` or `files` is missing.

    Args:
        to: Destination value under test.
        files: File list under test.

    Returns:
        None: Assertions validate validation-first behavior.

    Raises:
        AssertionError: Raised when validation is skipped.
    """

    platform_stub = _PlatformStub()
    adapter = _build_adapter(platform_stub)

    with pytest.raises(RingCentralValidationError, match='Both "to" and "files" parameters are required'):
        adapter.adapter_send(to=to, files=files)

    assert platform_stub.sent_calls == []


def test_adapters_ringcentral_fax_send_rejects_empty_attachment_list() -> None:
    """Reject a fax with no attachments without calling upstream."""

    platform_stub = _PlatformStub()
    adapter = _build_adapter(platform_stub)

    with pytest.raises(RingCentralValidationError, match="at least one file"):
        adapter.adapter_send(to="+15551234567", files=[])

    assert platform_stub.sent_calls == []


def test_adapters_ringcentral_fax_success_sends_once_and_returns_body_unchanged() -> None:
    """Send JSON payload, attachments and cover text once on success.

    Returns:
        None: Assertions validate request composition and passthrough.

    Raises:
        AssertionError: Raised when request parts or response differ.
    """

    platform_stub = _PlatformStub()
    adapter = _build_adapter(platform_stub)

    result = adapter.adapter_send(to="+15551234567", files=[_PDF], text="Hello")

    assert result is _QUEUED_RESPONSE
    assert platform_stub.refresh_calls == []
    sent_call = platform_stub.sent_calls[0]
    assert sent_call["path"] == "/restapi/v1.0/account/~/extension/~/fax"
    assert sent_call["access_token"] == "access-1"
    assert sent_call["request_payload"] == {"to": [{"phoneNumber": "+15551234567"}], "faxResolution": "High"}
    assert sent_call["files"] == [
        ("attachment", ("doc.pdf", b"%PDF-1.4", "application/pdf")),
        ("attachment", ("cover.txt", b"Hello", "text/plain")),
    ]


def test_adapters_ringcentral_fax_expired_token_refreshes_once_and_resends_same_request() -> None:
    """Refresh once on expiry and resend the identical payload.

    Returns:
        None: Assertions validate single refresh and single resend.

    Raises:
        AssertionError: Raised when retry count or payload differs.
    """

    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _QUEUED_RESPONSE])
    adapter = _build_adapter(platform_stub)

    result = adapter.adapter_send_fax(FaxRequest(to="+15551234567", attachments=(_PDF,), cover_page_text="Hi"))

    assert result is _QUEUED_RESPONSE
    assert platform_stub.refresh_calls == ["refresh-1"]
    assert [call["access_token"] for call in platform_stub.sent_calls] == ["access-1", "access-2"]
    first_call, second_call = platform_stub.sent_calls
    assert first_call["request_payload"] == second_call["request_payload"]
    assert first_call["files"] == second_call["files"]
    assert adapter.adapter_current_token() == TokenSet(access_token="access-2", refresh_token="refresh-2")


def test_adapters_ringcentral_fax_second_expiry_raises_exhausted_without_third_send() -> None:
    """Stop after one retry when the refreshed token is also rejected."""

    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _expired_error(), _QUEUED_RESPONSE])
    adapter = _build_adapter(platform_stub)

    with pytest.raises(RingCentralAuthExhaustedError, match="rejected after refresh"):
        adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert len(platform_stub.sent_calls) == 2
    assert len(platform_stub.refresh_calls) == 1


def test_adapters_ringcentral_fax_exhausted_on_first_attempt_is_not_retried() -> None:
    """Surface refresh-token exhaustion immediately without refresh or resend."""

    exhausted_error = RingCentralAuthExhaustedError(
        "RingCentral re-authentication required: status=401, code=refresh_token_expired, message=expired",
        error_code="refresh_token_expired",
        status_code=401,
    )
    platform_stub = _PlatformStub(send_outcomes=[exhausted_error])
    adapter = _build_adapter(platform_stub)

    with pytest.raises(RingCentralAuthExhaustedError) as error_info:
        adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert error_info.value is exhausted_error
    assert len(platform_stub.sent_calls) == 1
    assert platform_stub.refresh_calls == []


@pytest.mark.parametrize(
    "refresh_error",
    [
        RingCentralAuthError("RingCentral authentication failed", error_code="invalid_client", status_code=401),
        RingCentralApiError("RingCentral token request failed", error_code="UNKNOWN", status_code=503),
    ],
)
def test_adapters_ringcentral_fax_refresh_failure_raises_exhausted(refresh_error: Exception) -> None:
    """Convert refresh failures into the terminal re-authentication error.

    Args:
        refresh_error: Error raised by the refresh grant.

    Returns:
        None: Assertions validate refresh failure handling.

    Raises:
        AssertionError: Raised when refresh failures are retried or leak.
    """

    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _QUEUED_RESPONSE])
    platform_stub.refresh_outcome = refresh_error
    adapter = _build_adapter(platform_stub)

    with pytest.raises(RingCentralAuthExhaustedError, match="Failed to refresh token") as error_info:
        adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert error_info.value.__cause__ is refresh_error
    assert len(platform_stub.sent_calls) == 1


def test_adapters_ringcentral_fax_password_session_without_refresh_token_raises_exhausted() -> None:
    """Require re-authentication when the session holds no refresh token."""

    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _QUEUED_RESPONSE])
    adapter = _build_adapter(platform_stub, credential=PasswordCredential(username="user", password="secret"))

    with pytest.raises(RingCentralAuthExhaustedError, match="no refresh token"):
        adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert platform_stub.password_calls == [("user", "secret", None)]
    assert len(platform_stub.sent_calls) == 1
    assert platform_stub.refresh_calls == []


@pytest.mark.parametrize(
    "upstream_error",
    [
        RingCentralApiError("RingCentral request rejected", error_code="FAX-101", status_code=400),
        RingCentralTransportError("RingCentral transport request failed"),
    ],
)
def test_adapters_ringcentral_fax_non_auth_errors_pass_through_unchanged(upstream_error: Exception) -> None:
    """Propagate non-expiry failures as-is without refresh or resend.

    Args:
        upstream_error: Error raised by the first send.

    Returns:
        None: Assertions validate passthrough.

    Raises:
        AssertionError: Raised when errors are wrapped or retried.
    """

    platform_stub = _PlatformStub(send_outcomes=[upstream_error])
    adapter = _build_adapter(platform_stub)

    with pytest.raises(type(upstream_error)) as error_info:
        adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert error_info.value is upstream_error
    assert len(platform_stub.sent_calls) == 1
    assert platform_stub.refresh_calls == []


def test_adapters_ringcentral_fax_refresh_notifies_listeners() -> None:
    """Notify registered listeners with the renewed token set."""

    notified_tokens: list[TokenSet] = []
    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _QUEUED_RESPONSE])
    adapter = _build_adapter(platform_stub, token_refresh_listeners=[notified_tokens.append])

    adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert notified_tokens == [TokenSet(access_token="access-2", refresh_token="refresh-2")]


def test_adapters_ringcentral_fax_token_pair_authenticate_is_local() -> None:
    """Install configured token pair without upstream calls or notifications."""

    notified_tokens: list[TokenSet] = []
    platform_stub = _PlatformStub()
    adapter = _build_adapter(platform_stub, token_refresh_listeners=[notified_tokens.append])

    token_set = adapter.adapter_authenticate()

    assert token_set == TokenSet(access_token="access-1", refresh_token="refresh-1")
    assert notified_tokens == []
    assert platform_stub.jwt_calls == []


def test_adapters_ringcentral_fax_jwt_session_regenerates_jwt_on_expiry() -> None:
    """Authenticate lazily with JWT and regenerate via provider on expiry.

    Returns:
        None: Assertions validate JWT grant usage.

    Raises:
        AssertionError: Raised when JWT renewal is wrong.
    """

    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _QUEUED_RESPONSE])
    adapter = _build_adapter(
        platform_stub,
        credential=JwtCredential(jwt_token="jwt-configured"),
        jwt_token_provider=lambda: "jwt-fresh",
    )

    result = adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert result is _QUEUED_RESPONSE
    assert platform_stub.jwt_calls == ["jwt-configured", "jwt-fresh"]
    assert [call["access_token"] for call in platform_stub.sent_calls] == ["jwt-access-1", "jwt-access-2"]
    assert platform_stub.refresh_calls == []


def test_adapters_ringcentral_fax_blank_jwt_provider_result_raises_exhausted() -> None:
    """Treat blank regenerated JWT values as a failed refresh."""

    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _QUEUED_RESPONSE])
    adapter = _build_adapter(
        platform_stub,
        credential=JwtCredential(jwt_token="jwt-configured"),
        jwt_token_provider=lambda: "",
    )

    with pytest.raises(RingCentralAuthExhaustedError, match="blank token"):
        adapter.adapter_send(to="+15551234567", files=[_PDF])


def test_adapters_ringcentral_fax_private_key_session_signs_new_assertion(monkeypatch: pytest.MonkeyPatch) -> None:
    """Sign a fresh assertion for initial authentication and each renewal.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate assertion regeneration.

    Raises:
        AssertionError: Raised when assertions are reused.
    """

    signed_assertions: list[str] = []

    def _fake_assertion(**options: Any) -> str:
        signed_assertions.append(f"assertion-{len(signed_assertions) + 1}:{options['client_id']}")
        return signed_assertions[-1]

    monkeypatch.setattr(
        "ringcentral_fax.adapters.ringcentral_fax.jwt_build_private_key_assertion",
        _fake_assertion,
    )
    platform_stub = _PlatformStub(send_outcomes=[_expired_error(), _QUEUED_RESPONSE])
    adapter = _build_adapter(platform_stub, credential=PrivateKeyCredential(private_key="pem", key_id="kid"))

    adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert platform_stub.jwt_calls == ["assertion-1:client-id", "assertion-2:client-id"]


def test_adapters_ringcentral_fax_authorization_code_flow() -> None:
    """Require the OAuth callback before sending and install its tokens.

    Returns:
        None: Assertions validate authorization-code flow behavior.

    Raises:
        AssertionError: Raised when flow state is wrong.
    """

    notified_tokens: list[TokenSet] = []
    platform_stub = _PlatformStub()
    adapter = _build_adapter(
        platform_stub,
        credential=AuthorizationCodeCredential(redirect_url="https://app.test/oauth/callback"),
        token_refresh_listeners=[notified_tokens.append],
    )

    with pytest.raises(RingCentralAuthExhaustedError, match="authorization required"):
        adapter.adapter_send(to="+15551234567", files=[_PDF])
    assert "state=abc" in adapter.adapter_authorization_url(state="abc")

    token_set = adapter.adapter_handle_oauth_callback(" auth-code ")
    result = adapter.adapter_send(to="+15551234567", files=[_PDF])

    assert token_set == TokenSet(access_token="code-access", refresh_token="code-refresh")
    assert platform_stub.code_calls == [("auth-code", "https://app.test/oauth/callback")]
    assert notified_tokens == [token_set]
    assert result is _QUEUED_RESPONSE
    assert platform_stub.sent_calls[0]["access_token"] == "code-access"


def test_adapters_ringcentral_fax_blank_oauth_code_raises_validation_error() -> None:
    """Reject blank authorization codes without calling upstream."""

    platform_stub = _PlatformStub()
    adapter = _build_adapter(
        platform_stub,
        credential=AuthorizationCodeCredential(redirect_url="https://app.test/oauth/callback"),
    )

    with pytest.raises(RingCentralValidationError):
        adapter.adapter_handle_oauth_callback("  ")

    assert platform_stub.code_calls == []


def test_adapters_ringcentral_fax_authorization_url_requires_redirect_url() -> None:
    """Reject authorization URL requests when no redirect URL is configured."""

    adapter = _build_adapter(_PlatformStub())

    with pytest.raises(RingCentralConfigurationError, match="Redirect URL"):
        adapter.adapter_authorization_url()


class _ConcurrentPlatform:
    """Thread-safe platform double whose calls line up on a barrier.

    Sends carrying `stale_access_token` wait on the barrier and then fail with
    an expiry error, so every caller observes the same stale token before any
    refresh starts. Token grants sleep briefly to widen the race window.
    """

    def __init__(self, barrier: threading.Barrier, stale_access_token: str | None = None):
        self.barrier = barrier
        self.stale_access_token = stale_access_token
        self.calls_lock = threading.Lock()
        self.sent_tokens: list[str] = []
        self.refresh_calls: list[str] = []
        self.jwt_calls: list[str] = []

    def platform_post_multipart(self, path, access_token, request_payload, files):
        _ = (path, request_payload, files)
        with self.calls_lock:
            self.sent_tokens.append(access_token)
        if access_token == self.stale_access_token:
            self.barrier.wait()
            raise _expired_error()
        return _QUEUED_RESPONSE

    def platform_token_refresh(self, refresh_token):
        with self.calls_lock:
            self.refresh_calls.append(refresh_token)
        time.sleep(0.05)
        return TokenSet(access_token="access-2", refresh_token="refresh-2")

    def platform_token_jwt(self, assertion):
        with self.calls_lock:
            self.jwt_calls.append(assertion)
        time.sleep(0.05)
        return TokenSet(access_token="jwt-access")

    def platform_close(self):
        return None


def _run_concurrent_sends(adapter: RingCentralFaxAdapter, sender_count: int, start_barrier: threading.Barrier | None):
    """Send one fax from each of `sender_count` threads.

    Args:
        adapter: Shared adapter under test.
        sender_count: Number of sending threads.
        start_barrier: Optional barrier released when every thread is ready to send.

    Returns:
        tuple[list[Any], list[BaseException]]: Results and errors across threads.
    """

    results: list[Any] = []
    errors: list[BaseException] = []
    outcome_lock = threading.Lock()

    def _send() -> None:
        try:
            if start_barrier is not None:
                start_barrier.wait()
            result = adapter.adapter_send(to="+15551234567", files=[_PDF])
        except Exception as error:  # pylint: disable=broad-exception-caught
            with outcome_lock:
                errors.append(error)
            return
        with outcome_lock:
            results.append(result)

    threads = [threading.Thread(target=_send) for _ in range(sender_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return results, errors


def test_adapters_ringcentral_fax_concurrent_expiry_refreshes_once() -> None:
    """Serialize refresh across threads that all saw the same expired token.

    Returns:
        None: Assertions validate single refresh under contention.

    Raises:
        AssertionError: Raised when more than one refresh runs.
    """

    sender_count = 4
    platform_stub = _ConcurrentPlatform(threading.Barrier(sender_count, timeout=5), stale_access_token="access-1")
    notified_tokens: list[TokenSet] = []
    adapter = _build_adapter(platform_stub, token_refresh_listeners=[notified_tokens.append])
    adapter.adapter_authenticate()

    results, errors = _run_concurrent_sends(adapter, sender_count, start_barrier=None)

    assert errors == []
    assert results == [_QUEUED_RESPONSE] * sender_count
    assert platform_stub.refresh_calls == ["refresh-1"]
    assert notified_tokens == [TokenSet(access_token="access-2", refresh_token="refresh-2")]
    assert sorted(platform_stub.sent_tokens) == ["access-1"] * sender_count + ["access-2"] * sender_count


def test_adapters_ringcentral_fax_concurrent_first_sends_authenticate_once() -> None:
    """Issue a single JWT grant when several first sends start together.

    Returns:
        None: Assertions validate serialized lazy authentication.

    Raises:
        AssertionError: Raised when each thread issues its own grant.
    """

    sender_count = 4
    platform_stub = _ConcurrentPlatform(threading.Barrier(sender_count, timeout=5))
    notified_tokens: list[TokenSet] = []
    adapter = _build_adapter(
        platform_stub,
        credential=JwtCredential(jwt_token="jwt-configured"),
        token_refresh_listeners=[notified_tokens.append],
    )

    results, errors = _run_concurrent_sends(
        adapter,
        sender_count,
        start_barrier=threading.Barrier(sender_count, timeout=5),
    )

    assert errors == []
    assert len(results) == sender_count
    assert platform_stub.jwt_calls == ["jwt-configured"]
    assert notified_tokens == [TokenSet(access_token="jwt-access")]
    assert platform_stub.sent_tokens == ["jwt-access"] * sender_count


def test_adapters_ringcentral_fax_path_inputs_are_read_as_attachments(tmp_path: Path) -> None:
    """Read filesystem paths into attachments with guessed content types.

    Args:
        tmp_path: Pytest temporary directory fixture.

    Returns:
        None: Assertions validate path coercion.

    Raises:
        AssertionError: Raised when path content is not sent.
    """

    document_path = tmp_path / "invoice.pdf"
    document_path.write_bytes(b"%PDF-invoice")
    platform_stub = _PlatformStub()
    adapter = _build_adapter(platform_stub)

    adapter.adapter_send(to="+15551234567", files=[str(document_path)])

    assert platform_stub.sent_calls[0]["files"] == [
        ("attachment", ("invoice.pdf", b"%PDF-invoice", "application/pdf")),
    ]


def test_adapters_ringcentral_fax_unreadable_path_raises_validation_error(tmp_path: Path) -> None:
    """Reject missing files before calling upstream."""

    platform_stub = _PlatformStub()
    adapter = _build_adapter(platform_stub)

    with pytest.raises(RingCentralValidationError, match="could not be read"):
        adapter.adapter_send(to="+15551234567", files=[tmp_path / "missing.pdf"])

    assert platform_stub.sent_calls == []


def test_adapters_ringcentral_fax_close_releases_platform_client() -> None:
    platform_stub = _PlatformStub()

    _build_adapter(platform_stub).adapter_close()

    assert platform_stub.closed
