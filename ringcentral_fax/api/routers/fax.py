"""Fax API router composition for outbound fax submission."""

from __future__ import annotations

from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.responses import JSONResponse

from ringcentral_fax.adapters import FaxSenderPort, RingCentralFaxError
from ringcentral_fax.domain import FaxAttachment

from ..error_responses import api_error_response


def api_create_fax_router(fax_sender: FaxSenderPort) -> APIRouter:
    """Create fax router exposing the send endpoint.

    Args:
        fax_sender: Adapter-layer fax sender.

    Returns:
        APIRouter: Router exposing `POST /fax`.

    Raises:
        ValueError: Raised when fax_sender is invalid.
    """

    if fax_sender is None:
        raise ValueError("fax_sender must not be None")

    router = APIRouter(prefix="/fax", tags=["fax"])

    @router.post("")
    def api_fax_send(
        to: str | None = Form(default=None),
        text: str | None = Form(default=None),
        files: list[UploadFile] | None = File(default=None),
    ) -> JSONResponse:
        """Send one fax and return the upstream response body unchanged.

        Args:
            to: Destination phone number form field.
            text: Optional cover page text form field.
            files: Uploaded attachments, in send order.

        Returns:
            JSONResponse: Upstream response body, or a mapped error payload.
        """

        attachments = None
        if files is not None:
            attachments = [
                FaxAttachment(
                    file_name=upload.filename or "attachment",
                    content=upload.file.read(),
                    content_type=upload.content_type or "application/octet-stream",
                )
                for upload in files
            ]

        try:
            response_body = fax_sender.adapter_send(to=to, files=attachments, text=text or None)
        except RingCentralFaxError as error:
            return api_error_response(error)
        return JSONResponse(content=response_body, status_code=status.HTTP_200_OK)

    return router
