"""
Article Client — Create and update articles through the article endpoints.

## Endpoints

- Create: ``POST <create_article_url>`` → 201 ``{"success": true, "articleId": "..."}``
- Update: ``PUT <update_article_url>?id=<articleId>`` → 200 ``{"success": true, ...}``

Both require ``Authorization: Bearer <token>``. Failures answer with
``{"error": "...", "message": "..."}``; that text is surfaced to the author
through ``SubmissionError``.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..errors import SubmissionError
from ..models.article import ArticlePayload, SubmissionResult

logger = logging.getLogger(__name__)

USER_AGENT = "quillpress/1.0"


class ArticleClient:
    """Talks to the article collaborator over a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        create_url: str,
        update_url: str,
        client: httpx.AsyncClient,
        timeout: float = 30.0,
    ):
        self.create_url = create_url
        self.update_url = update_url
        self.client = client
        self.timeout = timeout

    async def save(
        self,
        payload: ArticlePayload,
        token: str,
        article_id: Optional[str] = None,
    ) -> str:
        """Create (no ``article_id``) or update an article. Returns its id."""
        if article_id:
            request = self.client.put(
                self.update_url,
                params={"id": article_id},
                json=payload.to_wire(),
                headers=self._headers(token),
                timeout=self.timeout,
            )
        else:
            request = self.client.post(
                self.create_url,
                json=payload.to_wire(),
                headers=self._headers(token),
                timeout=self.timeout,
            )

        try:
            response = await request
        except httpx.TimeoutException as e:
            raise SubmissionError("Saving the article timed out") from e
        except httpx.RequestError as e:
            raise SubmissionError(f"Saving the article failed: {e}") from e

        try:
            result = SubmissionResult.model_validate(response.json())
        except (ValueError, ValidationError):
            result = None

        if not response.is_success or result is None or not result.success:
            message = None
            if result is not None:
                message = result.error or result.message
            raise SubmissionError(
                message or f"Request failed: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        saved_id = result.article_id or article_id
        if not saved_id:
            raise SubmissionError("Article endpoint did not return an article id")

        logger.info(
            f"Article {'updated' if article_id else 'created'}: {saved_id}",
            extra={"article_id": saved_id},
        )
        return saved_id

    @staticmethod
    def _headers(token: str) -> dict:
        return {
            "Authorization": f"Bearer {token}",
            "User-Agent": USER_AGENT,
        }
