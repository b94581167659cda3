"""
Upload Orchestrator — Upload every surviving placeholder concurrently.

## Algorithm

1. Collect the tracking ids still present in the document snapshot.
2. Drop registry entries whose id is no longer in the document (the
   author deleted the image before saving; nothing is uploaded).
3. For each remaining entry, concurrently: request a signed location,
   then PUT the bytes there.
4. A failure at either step, of any kind, becomes a failed outcome for
   that image only.
   Every upload runs to completion ("settle", not "fail fast").
5. Return the outcomes in document order.

Uploads are unbounded by default. ``max_concurrent`` > 0 bounds them with
a semaphore.

## Cancellation

A ``CancelToken`` is checked after the location request and after the
transfer. Once cancelled, remaining uploads resolve to failed outcomes
with code ``cancelled`` and the caller must not commit anything.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, List, Optional

from ..document import Document
from ..errors import SaveCancelled, UploadError
from ..logging_config import log_context
from ..models.upload import UploadOutcome
from .registry import PendingFile, PendingUploadRegistry

if TYPE_CHECKING:
    from ..clients.storage import StorageClient

logger = logging.getLogger(__name__)


class CancelToken:
    """Flag set when a save is abandoned (e.g. the author navigates away)."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise SaveCancelled()


class UploadOrchestrator:
    """Uploads staged images referenced by a document snapshot."""

    def __init__(self, storage: "StorageClient", max_concurrent: int = 0):
        self.storage = storage
        self.max_concurrent = max_concurrent

    async def upload_all(
        self,
        snapshot: Document,
        registry: PendingUploadRegistry,
        token: str,
        cancel: Optional[CancelToken] = None,
    ) -> List[UploadOutcome]:
        """Upload every live placeholder; return outcomes in document order."""
        cancel = cancel or CancelToken()
        live_ids = snapshot.tracking_ids()
        live = set(live_ids)

        for temp_id, file in registry.list():
            if temp_id not in live:
                logger.info(
                    f"Dropping {file.filename}: removed from the document before saving",
                    extra={"temp_id": temp_id},
                )
                registry.drop(temp_id)

        jobs = []
        for temp_id in live_ids:
            file = registry.get(temp_id)
            if file is None:
                logger.warning(
                    f"Placeholder {temp_id} has no staged file; leaving it as is",
                    extra={"temp_id": temp_id},
                )
                continue
            jobs.append((temp_id, file))

        if not jobs:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent) if self.max_concurrent > 0 else None
        logger.info(
            f"Uploading {len(jobs)} staged image(s), {registry.total_size_bytes} bytes in total"
        )

        outcomes = await asyncio.gather(*[
            self._upload_one(temp_id, file, token, cancel, semaphore)
            for temp_id, file in jobs
        ])

        failed = sum(1 for o in outcomes if not o.ok)
        if failed:
            logger.warning(f"{failed} of {len(outcomes)} uploads failed")
        return list(outcomes)

    async def _upload_one(
        self,
        temp_id: str,
        file: PendingFile,
        token: str,
        cancel: CancelToken,
        semaphore: Optional[asyncio.Semaphore],
    ) -> UploadOutcome:
        guard = semaphore if semaphore is not None else contextlib.nullcontext()
        with log_context(temp_id=temp_id):
            async with guard:
                try:
                    cancel.raise_if_cancelled()
                    location = await self.storage.request_signed_location(
                        file.filename, file.mime_type, token
                    )
                    cancel.raise_if_cancelled()
                    await self.storage.transfer(location, file)
                    cancel.raise_if_cancelled()
                except SaveCancelled as e:
                    logger.info(f"Upload of {file.filename} abandoned")
                    return UploadOutcome.failed(temp_id, e.code, str(e))
                except UploadError as e:
                    logger.error(f"Upload of {file.filename} failed: {e}")
                    return UploadOutcome.failed(temp_id, e.code, str(e))
                except Exception as e:
                    # Still this image's own outcome
                    logger.exception(f"Upload of {file.filename} failed unexpectedly")
                    return UploadOutcome.failed(
                        temp_id, UploadError.code, f"Upload of {file.filename} failed: {e}"
                    )

            logger.info(f"Uploaded {file.filename} → {location.public_url}")
            return UploadOutcome.succeeded(temp_id, location.public_url)
