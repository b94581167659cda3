"""
Storage Client — Signed-location request and byte transfer.

Uploading one image is two requests:

1. ``POST <signed_upload_url>`` with ``{"filename", "contentType"}`` and the
   caller's bearer token, answered with ``{"signedUrl", "publicUrl"}``.
2. ``PUT <signedUrl>`` with ``Content-Type`` set to the declared MIME type
   and the raw bytes as the body.

Any non-2xx status, transport error or malformed response is raised as
``SignedLocationError`` or ``TransferError``; the orchestrator turns those
into failed outcomes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from ..errors import SignedLocationError, TransferError
from ..models.upload import SignedLocation

if TYPE_CHECKING:
    from ..editor.registry import PendingFile

logger = logging.getLogger(__name__)

USER_AGENT = "quillpress/1.0"


class StorageClient:
    """Talks to the storage collaborator over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        signed_upload_url: str,
        client: httpx.AsyncClient,
        timeout: float = 30.0,
    ):
        self.signed_upload_url = signed_upload_url
        self.client = client
        self.timeout = timeout

    async def request_signed_location(
        self,
        filename: str,
        content_type: str,
        token: str,
    ) -> SignedLocation:
        """Ask the storage collaborator where to put one file."""
        try:
            response = await self.client.post(
                self.signed_upload_url,
                json={"filename": filename, "contentType": content_type},
                headers={
                    "Authorization": f"Bearer {token}",
                    "User-Agent": USER_AGENT,
                },
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise SignedLocationError(f"Signed URL request for {filename} timed out") from e
        except httpx.RequestError as e:
            raise SignedLocationError(f"Signed URL request for {filename} failed: {e}") from e

        if not response.is_success:
            raise SignedLocationError(
                f"Signed URL request for {filename} failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return SignedLocation.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SignedLocationError(
                f"Malformed signed URL response for {filename}",
                status_code=response.status_code,
            ) from e

    async def transfer(self, location: SignedLocation, file: "PendingFile") -> None:
        """PUT the file's bytes to a signed location."""
        try:
            response = await self.client.put(
                location.signed_url,
                content=file.data,
                headers={"Content-Type": file.mime_type},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise TransferError(f"Upload of {file.filename} timed out") from e
        except httpx.RequestError as e:
            raise TransferError(f"Upload of {file.filename} failed: {e}") from e
        except httpx.InvalidURL as e:
            raise TransferError(f"Signed URL for {file.filename} is not usable: {e}") from e

        if not response.is_success:
            raise TransferError(
                f"Upload of {file.filename} failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )
        logger.debug(f"Transferred {file.size_bytes} bytes for {file.filename}")
