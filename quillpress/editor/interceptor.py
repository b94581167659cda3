"""
Paste/Drop Interceptor — Route pasted images through staging.

When an image is pasted or dropped, the editing surface inserts it as an
inline ``data:`` URI embed with no tracking id, bypassing the registry.
This observer watches every mutation and, for each such embed:

1. decodes the inline bytes into a ``PendingFile``;
2. stages a tracked replacement at the original's offset through the
   placeholder embedder;
3. deletes the original, located again by a running-offset walk from the
   start of the document (exact ``src`` match, no tracking id).

Reprocessing a mutation is harmless: replacements carry a tracking id and
are skipped, and an original that has already been removed is not found.

Malformed inline data is reported to the session and logged; the pasted
node is left as it is and will be saved as an ordinary untracked embed.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import mimetypes
from typing import TYPE_CHECKING, List, Optional

from PIL import Image

from ..document import DATA_URI_PREFIX, Embed
from ..errors import AuthRequired, ImageTooLarge, MalformedPasteData
from .registry import PendingFile

if TYPE_CHECKING:
    from .embedder import PlaceholderEmbedder
    from .session import Mutation

logger = logging.getLogger(__name__)


def decode_data_uri(src: str, filename_stem: str = "pasted-image") -> PendingFile:
    """
    Reconstruct a file from a base64 ``data:`` URI holding an image.

    The MIME type comes from the URI header when it names an image type,
    otherwise from the format Pillow detects in the bytes.

    Raises:
        MalformedPasteData: not a base64 data URI, or not an image
    """
    if not src.startswith(DATA_URI_PREFIX):
        raise MalformedPasteData("Not a data: URI")

    header, sep, payload = src[len(DATA_URI_PREFIX):].partition(",")
    params = header.split(";")
    if not sep or "base64" not in params[1:]:
        raise MalformedPasteData("Pasted image is not base64-encoded")

    try:
        data = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedPasteData(f"Invalid base64 in pasted image: {e}") from e
    if not data:
        raise MalformedPasteData("Pasted image is empty")

    try:
        with Image.open(io.BytesIO(data)) as img:
            detected = Image.MIME.get(img.format or "")
            img.verify()
    except Exception as e:
        raise MalformedPasteData(f"Pasted data is not a readable image: {e}") from e

    declared = params[0].strip().lower()
    mime_type = declared if declared.startswith("image/") else detected
    if not mime_type:
        raise MalformedPasteData("Could not determine the pasted image type")

    ext = mimetypes.guess_extension(mime_type) or ".img"
    return PendingFile(data=data, mime_type=mime_type, filename=f"{filename_stem}{ext}")


class PasteInterceptor:
    """Mutation observer that stages pasted and dropped images."""

    def __init__(self, embedder: "PlaceholderEmbedder"):
        self.embedder = embedder
        self._pasted_count = 0

    def __call__(self, mutation: "Mutation") -> List[str]:
        return self.process(mutation)

    def process(self, mutation: "Mutation") -> List[str]:
        """Stage every untracked inline image inserted by ``mutation``."""
        staged = []
        offset = mutation.position
        for node in mutation.inserted:
            at, offset = offset, offset + node.length
            if not isinstance(node, Embed) or node.is_staged or not node.is_inline_data:
                continue
            temp_id = self._replace(node.src, at)
            if temp_id:
                staged.append(temp_id)
        return staged

    def _replace(self, src: str, position: int) -> Optional[str]:
        session = self.embedder.session

        # Look only at the pasted node; None once an earlier pass replaced it
        if session.document.find_untracked(src, position, position + 1) is None:
            return None

        try:
            file = decode_data_uri(src, f"pasted-image-{self._pasted_count + 1}")
        except MalformedPasteData as e:
            logger.warning(f"Leaving pasted image unstaged: {e}")
            session.report_error(e)
            return None

        try:
            temp_id = self.embedder.embed_at(position, file)
        except (AuthRequired, ImageTooLarge) as e:
            logger.warning(f"Could not stage pasted image: {e}")
            session.report_error(e)
            return None
        self._pasted_count += 1

        # The replacement went in at ``position``, pushing the original one right
        if session.document.find_untracked(src, position + 1, position + 2) is not None:
            session.delete(position + 1, 1)

        logger.info(f"Staged pasted image as {temp_id}", extra={"temp_id": temp_id})
        return temp_id
