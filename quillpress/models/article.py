"""
Article Models — Form metadata and the article collaborator's wire format.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_AUTHOR_NAME = "Unknown Author"


class ArticleForm(BaseModel):
    """Metadata entered alongside the article body."""

    title: str
    short_description: str = ""
    status: Literal["draft", "published"] = "draft"
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    author_name: Optional[str] = None
    # Set when editing an existing article
    article_id: Optional[str] = None
    # Existing cover image, kept when no new image is uploaded
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Title is required")
        return value

    @field_validator("categories", "tags")
    @classmethod
    def _strip_labels(cls, value: List[str]) -> List[str]:
        return [v.strip() for v in value if v and v.strip()]


class ArticlePayload(BaseModel):
    """Request body sent to the article create/update endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    content: str
    short_description: str = Field(default="", alias="shortDescription")
    status: Literal["draft", "published"] = "draft"
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    author_name: str = Field(default=DEFAULT_AUTHOR_NAME, alias="authorName")
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @classmethod
    def from_form(
        cls,
        form: ArticleForm,
        content: str,
        image_url: Optional[str],
        author_name: Optional[str] = None,
    ) -> "ArticlePayload":
        """Merge form metadata with reconciled content."""
        return cls(
            title=form.title,
            content=content,
            short_description=form.short_description,
            status=form.status,
            categories=list(form.categories),
            tags=list(form.tags),
            author_name=form.author_name or author_name or DEFAULT_AUTHOR_NAME,
            image_url=image_url,
        )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys the endpoints expect."""
        return self.model_dump(by_alias=True)


class SubmissionResult(BaseModel):
    """Response of the article create/update endpoints."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    success: bool = False
    article_id: Optional[str] = Field(default=None, alias="articleId")
    message: Optional[str] = None
    error: Optional[str] = None
