"""Pydantic models for the editor pipeline's wire formats and results."""

from .article import ArticleForm, ArticlePayload, SubmissionResult
from .upload import ErrorDetails, SignedLocation, UploadOutcome

__all__ = [
    "ArticleForm",
    "ArticlePayload",
    "ErrorDetails",
    "SignedLocation",
    "SubmissionResult",
    "UploadOutcome",
]
