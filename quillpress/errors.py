"""
Error Taxonomy — Every failure the editor pipeline can surface.

Staging and paste failures are recovered locally by the editor session.
Upload, reconciliation and submission failures are raised to the caller
with a human-readable message (``str(exc)``) and a short ``code`` that is
also used in ``ErrorDetails`` on failed upload outcomes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .models.upload import UploadOutcome


class QuillpressError(Exception):
    """Base class for all editor pipeline errors."""

    code = "error"


class AuthRequired(QuillpressError):
    """No signed-in identity where one is required."""

    code = "auth_required"

    def __init__(self, message: str = "You must be signed in to do this"):
        super().__init__(message)


class MalformedPasteData(QuillpressError):
    """Inline image bytes from a paste or drop could not be decoded."""

    code = "malformed_paste"


class ImageTooLarge(QuillpressError):
    """A staged image exceeds the configured size limit."""

    code = "image_too_large"

    def __init__(self, filename: str, size_bytes: int, limit_bytes: int):
        self.filename = filename
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Image '{filename}' is {size_bytes} bytes, "
            f"larger than the {limit_bytes} byte limit"
        )


class UploadError(QuillpressError):
    """A single image upload failed."""

    code = "upload_failed"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SignedLocationError(UploadError):
    """The storage collaborator refused or botched the signed-location request."""

    code = "signed_location_failed"


class TransferError(UploadError):
    """The byte transfer to a signed location failed."""

    code = "transfer_failed"


class PartialUploadFailure(QuillpressError):
    """At least one staged image failed to upload during a save."""

    code = "partial_upload_failure"

    def __init__(self, outcomes: List["UploadOutcome"]):
        self.outcomes = outcomes
        self.failed = [o for o in outcomes if not o.ok]
        self.total = len(outcomes)
        super().__init__(
            f"{len(self.failed)} of {self.total} images failed to upload. "
            f"Your article was not saved; try again."
        )


class SubmissionError(QuillpressError):
    """The article collaborator rejected a save."""

    code = "submission_failed"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SaveInProgress(QuillpressError):
    """A save is already in flight for this editor."""

    code = "busy"

    def __init__(self, message: str = "A save is already in progress"):
        super().__init__(message)


class SaveCancelled(QuillpressError):
    """The save was abandoned before it could commit."""

    code = "cancelled"

    def __init__(self, message: str = "Save cancelled"):
        super().__init__(message)


class EmptyContent(QuillpressError):
    """The article body has no text and no images."""

    code = "empty_content"

    def __init__(self, message: str = "Content cannot be empty"):
        super().__init__(message)
