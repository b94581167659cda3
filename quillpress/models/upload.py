"""
Upload Models — Signed locations and per-image upload outcomes.

Every staged image produces exactly one outcome per save attempt,
whether the upload succeeded or failed, the way every adapter call
produces a receipt.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SignedLocation(BaseModel):
    """Response of the storage collaborator's signed-location endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    signed_url: str = Field(alias="signedUrl", min_length=1)
    public_url: str = Field(alias="publicUrl", min_length=1)

    @field_validator("signed_url", "public_url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value


class ErrorDetails(BaseModel):
    """Details about a failed upload."""

    code: str
    message: str


class UploadOutcome(BaseModel):
    """Result of uploading one staged image."""

    model_config = ConfigDict(frozen=True)

    temp_id: str
    status: Literal["succeeded", "failed"]
    public_url: Optional[str] = None
    error: Optional[ErrorDetails] = None

    @property
    def ok(self) -> bool:
        return self.status == "succeeded"

    @classmethod
    def succeeded(cls, temp_id: str, public_url: str) -> "UploadOutcome":
        """Create a successful outcome."""
        return cls(temp_id=temp_id, status="succeeded", public_url=public_url)

    @classmethod
    def failed(cls, temp_id: str, code: str, message: str) -> "UploadOutcome":
        """Create a failed outcome."""
        return cls(
            temp_id=temp_id,
            status="failed",
            error=ErrorDetails(code=code, message=message),
        )
