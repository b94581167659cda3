"""
Editor Session — The live document, its registry and its observers.

The session is the single owner of the editable document. Every edit
replaces ``session.document`` with a new immutable ``Document`` and is
announced to observers as a ``Mutation``. The paste interceptor is one
such observer; it is installed automatically.

## Usage

    session = EditorSession(auth, config=load_config())
    session.insert_text(0, "Hello\\n")
    temp_id = session.insert_image(5, PendingFile(...))
    session.paste(6, [Embed(src="data:image/png;base64,...")])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..auth import AuthProvider
from ..config.loader import EditorConfig
from ..document import Document, Node, TextRun
from ..errors import QuillpressError
from .embedder import PlaceholderEmbedder
from .interceptor import PasteInterceptor
from .registry import PendingFile, PendingUploadRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Mutation:
    """One change to the live document."""

    before: Document
    after: Document
    position: int
    inserted: Tuple[Node, ...] = ()
    deleted: int = 0
    source: str = "user"


Observer = Callable[[Mutation], Any]


class EditorSession:
    """Owns the live document and routes edits through observers."""

    def __init__(
        self,
        auth: AuthProvider,
        config: Optional[EditorConfig] = None,
        registry: Optional[PendingUploadRegistry] = None,
        document: Optional[Document] = None,
        on_error: Optional[Callable[[QuillpressError], Any]] = None,
    ):
        self.auth = auth
        self.config = config or EditorConfig()
        self.registry = registry if registry is not None else PendingUploadRegistry()
        self.on_error = on_error
        self.cursor = 0
        self._document = document or Document()
        self._observers: List[Observer] = []

        self.embedder = PlaceholderEmbedder(self)
        self.interceptor = PasteInterceptor(self.embedder)
        self.observe(self.interceptor)

    @property
    def document(self) -> Document:
        return self._document

    @property
    def max_image_bytes(self) -> int:
        return self.config.max_image_bytes

    def observe(self, observer: Observer) -> Callable[[], None]:
        """Register a mutation observer. Returns a function that removes it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def report_error(self, error: QuillpressError) -> None:
        """Hand a recoverable error to the surrounding UI."""
        if self.on_error:
            self.on_error(error)

    # ── Edits ────────────────────────────────────────────────────

    def apply(
        self,
        position: int,
        inserted: Sequence[Node] = (),
        delete: int = 0,
        source: str = "user",
    ) -> Mutation:
        """Delete ``delete`` units at ``position``, then insert ``inserted`` there."""
        before = self._document
        position = max(0, min(position, before.length))
        after = before.delete(position, delete) if delete else before
        offset = position
        for node in inserted:
            after = after.insert(offset, node)
            offset += node.length

        self._document = after
        self.cursor = offset
        mutation = Mutation(
            before=before,
            after=after,
            position=position,
            inserted=tuple(inserted),
            deleted=delete,
            source=source,
        )
        for observer in list(self._observers):
            observer(mutation)
        return mutation

    def insert_text(
        self,
        position: int,
        text: str,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> Mutation:
        return self.apply(position, [TextRun(text, dict(attributes or {}))])

    def delete(self, position: int, length: int = 1) -> Mutation:
        return self.apply(position, delete=length)

    def delete_image(self, temp_id: str) -> bool:
        """Remove the staged image with this tracking id from the document."""
        for offset, embed in self._document.embeds():
            if embed.tracking_id == temp_id:
                self.delete(offset, 1)
                return True
        return False

    def paste(self, position: int, nodes: Sequence[Node]) -> Mutation:
        """Insert clipboard or drop content as the editing surface would."""
        return self.apply(position, nodes, source="paste")

    def insert_image(self, position: int, file: PendingFile) -> str:
        """Stage an image chosen through the image button."""
        return self.embedder.embed_at(position, file)

    def load(self, document: Document) -> None:
        """Replace the whole document (e.g. when opening an article)."""
        self._document = document
        self.cursor = document.length

    def commit(self, document: Document) -> None:
        """Install a document produced by the save pipeline."""
        self._document = document
        self.cursor = min(self.cursor, document.length)
