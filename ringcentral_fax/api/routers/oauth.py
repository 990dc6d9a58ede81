"""OAuth router composition for the authorization-code flow."""

from __future__ import annotations

import secrets
import threading
from collections import deque
from typing import Final

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse

from ringcentral_fax.adapters import OAuthFlowPort, RingCentralFaxError

from ..error_responses import api_error_response

_OAUTH_PENDING_STATE_LIMIT: Final[int] = 128


def api_create_oauth_router(oauth_flow: OAuthFlowPort) -> APIRouter:
    """Create OAuth router with authorize and callback endpoints.

    `/oauth/authorize` issues the `state` value (generated when the caller
    does not pass one) and `/oauth/callback` accepts each issued state once.
    Login URLs built elsewhere, such as by the `authorization-url` command,
    must complete their callback outside this router.

    Args:
        oauth_flow: Adapter-layer OAuth flow implementation.

    Returns:
        APIRouter: Router exposing `/oauth/authorize` and `/oauth/callback`.

    Raises:
        ValueError: Raised when oauth_flow is invalid.
    """

    if oauth_flow is None:
        raise ValueError("oauth_flow must not be None")

    router = APIRouter(prefix="/oauth", tags=["oauth"])
    pending_states: deque[str] = deque(maxlen=_OAUTH_PENDING_STATE_LIMIT)
    pending_states_lock = threading.Lock()

    def _api_oauth_consume_state(state: str | None) -> bool:
        if not state:
            return False
        with pending_states_lock:
            if state not in pending_states:
                return False
            pending_states.remove(state)
            return True

    @router.get("/authorize")
    def api_oauth_authorize(state: str | None = Query(default=None)) -> JSONResponse:
        """Return the RingCentral login URL and the state it carries."""

        issued_state = (state or "").strip() or secrets.token_urlsafe(16)
        try:
            authorization_url = oauth_flow.adapter_authorization_url(state=issued_state)
        except RingCentralFaxError as error:
            return api_error_response(error)

        with pending_states_lock:
            pending_states.append(issued_state)
        payload = {"authorization_url": authorization_url, "state": issued_state}
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/callback")
    def api_oauth_callback(
        code: str | None = Query(default=None),
        state: str | None = Query(default=None),
        error: str | None = Query(default=None),
        error_description: str | None = Query(default=None),
    ) -> JSONResponse:
        """Complete the authorization-code exchange.

        Token values are persisted through refresh listeners and are not echoed.

        Returns:
            JSONResponse: Authorization status and token expiry metadata.
        """

        if not _api_oauth_consume_state(state):
            payload = {
                "status": "error",
                "message": "OAuth state does not match a pending authorization request",
                "error_code": "invalid_state",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        if error:
            payload = {
                "status": "error",
                "message": error_description or "authorization was not granted",
                "error_code": error,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_400_BAD_REQUEST)

        try:
            token_set = oauth_flow.adapter_handle_oauth_callback(code=code or "")
        except RingCentralFaxError as adapter_error:
            return api_error_response(adapter_error)

        payload = {
            "status": "authorized",
            "state": state,
            "token_type": token_set.token_type,
            "expires_in": token_set.expires_in,
            "refresh_token_expires_in": token_set.refresh_token_expires_in,
            "owner_id": token_set.owner_id,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
