"""
Placeholder Embedder — Insert a staged image without touching the network.

The file is staged in the registry under a fresh tracking id and a
``data:`` URI preview is inserted at the requested position, tagged with
that id. The upload itself happens later, at save time.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..auth import require_user
from ..document import Embed
from ..errors import ImageTooLarge
from .registry import PendingFile

if TYPE_CHECKING:
    from .session import EditorSession

logger = logging.getLogger(__name__)


class PlaceholderEmbedder:
    """Stages files and inserts tracked preview embeds."""

    def __init__(self, session: "EditorSession"):
        self.session = session

    def embed_at(self, position: int, file: PendingFile) -> str:
        """
        Stage ``file`` and insert its preview at ``position``.

        Raises:
            AuthRequired: nobody is signed in
            ImageTooLarge: the file exceeds the configured limit

        Returns:
            The tracking id of the new placeholder. The cursor is left
            immediately after the inserted embed.
        """
        session = self.session
        require_user(session.auth)

        limit = session.max_image_bytes
        if limit and file.size_bytes > limit:
            raise ImageTooLarge(file.filename, file.size_bytes, limit)

        temp_id = session.registry.stage(file)
        embed = Embed(src=file.to_data_uri(), tracking_id=temp_id)

        mutation = session.apply(position, [embed], source="embed")
        session.cursor = mutation.position + 1

        logger.info(
            f"Embedded {file.filename} at {mutation.position} as {temp_id}",
            extra={"temp_id": temp_id},
        )
        return temp_id
