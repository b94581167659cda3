"""
Submission Pipeline — Upload, reconcile, then save the article.

## Sequence

1. Reject if a save is already in flight for this editor (``SaveInProgress``).
2. Snapshot the live document; fetch the author's bearer token.
3. Upload every surviving placeholder (``UploadOrchestrator``).
4. Reconcile (``reconcile``). On ``PartialUploadFailure`` stop here: the
   live document is untouched and the article endpoint is never called.
5. Point the live document's placeholders at their public URLs.
6. Create or update the article with the reconciled HTML and cover image.

If the article endpoint rejects the save, the cover image chosen in step
4 is remembered so an immediate retry neither re-uploads nor loses it.

## Usage

    async with httpx.AsyncClient() as client:
        pipeline = SubmissionPipeline.from_config(session, config, client)
        article_id = await pipeline.save(ArticleForm(title="Hello"))
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

import httpx

from ..auth import require_user
from ..clients.articles import ArticleClient
from ..clients.storage import StorageClient
from ..config.loader import EditorConfig
from ..errors import EmptyContent, SaveInProgress, SubmissionError
from ..logging_config import log_context
from ..models.article import ArticleForm, ArticlePayload
from .orchestrator import CancelToken, UploadOrchestrator
from .reconcile import reconcile, resolve_placeholders
from .session import EditorSession

logger = logging.getLogger(__name__)


class SubmissionPipeline:
    """Saves one editor session's article, one save at a time."""

    def __init__(
        self,
        session: EditorSession,
        orchestrator: UploadOrchestrator,
        articles: ArticleClient,
    ):
        self.session = session
        self.orchestrator = orchestrator
        self.articles = articles
        self._busy = False
        self._pending_image_url: Optional[str] = None

    @classmethod
    def from_config(
        cls,
        session: EditorSession,
        config: EditorConfig,
        client: httpx.AsyncClient,
    ) -> "SubmissionPipeline":
        """Wire the pipeline to the configured endpoints."""
        problems = config.validate()
        if problems:
            raise ValueError("Invalid editor configuration: " + "; ".join(problems))

        storage = StorageClient(config.signed_upload_url, client, timeout=config.http_timeout)
        articles = ArticleClient(
            config.create_article_url,
            config.update_article_url,
            client,
            timeout=config.http_timeout,
        )
        return cls(
            session,
            UploadOrchestrator(storage, max_concurrent=config.max_concurrent_uploads),
            articles,
        )

    @property
    def busy(self) -> bool:
        return self._busy

    async def save(self, form: ArticleForm, cancel: Optional[CancelToken] = None) -> str:
        """
        Upload staged images and save the article.

        Returns:
            The article id.

        Raises:
            SaveInProgress: another save is in flight
            AuthRequired: nobody is signed in
            EmptyContent: the body has no text and no images
            PartialUploadFailure: at least one image failed to upload
            SubmissionError: the article endpoint rejected the save
            SaveCancelled: ``cancel`` fired before the save could commit
        """
        if self._busy:
            raise SaveInProgress()
        self._busy = True
        try:
            with log_context(save_id=uuid4().hex[:8]):
                return await self._save(form, cancel or CancelToken())
        finally:
            self._busy = False

    async def _save(self, form: ArticleForm, cancel: CancelToken) -> str:
        session = self.session
        user = require_user(session.auth)

        snapshot = session.document
        if not snapshot.has_content():
            raise EmptyContent()

        token = await session.auth.get_token()
        cancel.raise_if_cancelled()

        logger.info(f"Saving '{form.title}' ({len(snapshot.tracking_ids())} staged image(s))")
        outcomes = await self.orchestrator.upload_all(snapshot, session.registry, token, cancel)
        cancel.raise_if_cancelled()

        reconciled = reconcile(snapshot, outcomes, session.registry)

        urls = {o.temp_id: o.public_url for o in outcomes if o.public_url}
        session.commit(resolve_placeholders(session.document, urls))

        image_url = (
            reconciled.primary_image_url
            or self._pending_image_url
            or form.image_url
        )
        payload = ArticlePayload.from_form(form, reconciled.html, image_url, user.display_name)

        try:
            article_id = await self.articles.save(payload, token, form.article_id)
        except SubmissionError as e:
            self._pending_image_url = image_url
            logger.error(f"Article save failed: {e}")
            raise

        self._pending_image_url = None
        logger.info(
            f"Saved article {article_id}",
            extra={"article_id": article_id},
        )
        return article_id
