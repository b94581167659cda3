"""
Pending Upload Registry — Image bytes staged locally until save time.

The registry is an explicit object owned by the editor session and passed
into the upload orchestrator and reconciliation pass. It performs no I/O.

## Usage

    from quillpress.editor.registry import PendingFile, PendingUploadRegistry

    registry = PendingUploadRegistry()
    temp_id = registry.stage(PendingFile(data=b"...", mime_type="image/png", filename="a.png"))
    registry.get(temp_id)   # → PendingFile
    registry.drop(temp_id)  # no-op if already gone
"""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingFile:
    """Raw bytes of an image awaiting upload."""

    data: bytes
    mime_type: str
    filename: str

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    def to_data_uri(self) -> str:
        """Locally renderable preview of the file."""
        b64 = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{b64}"


def new_temp_id() -> str:
    """Generate a fresh, never-reused tracking id."""
    return f"tmp_{uuid4().hex}"


class PendingUploadRegistry:
    """In-memory map from tracking id to staged file, in staging order."""

    def __init__(self) -> None:
        self._entries: Dict[str, PendingFile] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, temp_id: object) -> bool:
        return temp_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def stage(self, file: PendingFile, temp_id: Optional[str] = None) -> str:
        """Stage a file and return its tracking id."""
        temp_id = temp_id or new_temp_id()
        if temp_id in self._entries:
            raise ValueError(f"Tracking id '{temp_id}' is already staged")
        self._entries[temp_id] = file
        logger.debug(
            f"Staged {file.filename} ({file.size_bytes} bytes) as {temp_id}",
            extra={"temp_id": temp_id},
        )
        return temp_id

    def get(self, temp_id: str) -> Optional[PendingFile]:
        return self._entries.get(temp_id)

    def drop(self, temp_id: str) -> None:
        """Forget a staged file. Dropping an absent id is a no-op."""
        if self._entries.pop(temp_id, None) is not None:
            logger.debug(f"Dropped {temp_id}", extra={"temp_id": temp_id})

    def list(self) -> List[Tuple[str, PendingFile]]:
        """All ``(temp_id, file)`` pairs in staging order."""
        return list(self._entries.items())

    @property
    def total_size_bytes(self) -> int:
        return sum(f.size_bytes for f in self._entries.values())
