"""
Reconciliation Pass — Swap placeholders for permanent URLs.

Given the snapshot the uploads were made from and their outcomes:

- if any outcome failed, raise ``PartialUploadFailure``; the snapshot and
  the registry are left alone so the save can be retried;
- otherwise replace each placeholder's ``src`` with its public URL, strip
  its tracking id, pick the first succeeded outcome (document order) as
  the cover image and serialize the result to HTML.

The rewrite is a pure function of its inputs: running it again on the
same snapshot, or on its own output, yields identical HTML.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..document import Document, Embed
from ..errors import PartialUploadFailure
from ..models.upload import UploadOutcome
from .registry import PendingUploadRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciledContent:
    """Final artifact of one successful save attempt."""

    document: Document
    html: str
    primary_image_url: Optional[str]
    resolved_ids: Tuple[str, ...] = ()


def resolve_placeholders(document: Document, urls: Dict[str, str]) -> Document:
    """Point every placeholder found in ``urls`` at its public URL."""

    def resolve(embed: Embed) -> Embed:
        if embed.tracking_id and embed.tracking_id in urls:
            return embed.resolved(urls[embed.tracking_id])
        return embed

    return document.map_embeds(resolve)


def reconcile(
    snapshot: Document,
    outcomes: Sequence[UploadOutcome],
    registry: Optional[PendingUploadRegistry] = None,
) -> ReconciledContent:
    """
    Rewrite ``snapshot`` using upload ``outcomes``.

    Raises:
        PartialUploadFailure: at least one outcome failed

    When ``registry`` is given, every resolved tracking id is dropped
    from it after a successful rewrite.
    """
    outcomes = list(outcomes)
    if any(not o.ok for o in outcomes):
        error = PartialUploadFailure(outcomes)
        logger.warning(str(error))
        raise error

    urls = {o.temp_id: o.public_url for o in outcomes if o.public_url}
    document = resolve_placeholders(snapshot, urls)

    resolved: List[str] = [t for t in snapshot.tracking_ids() if t in urls]
    primary = urls[resolved[0]] if resolved else None

    if registry is not None:
        for temp_id in resolved:
            registry.drop(temp_id)

    logger.debug(f"Reconciled {len(resolved)} placeholder(s), cover image: {primary}")
    return ReconciledContent(
        document=document,
        html=document.to_html(),
        primary_image_url=primary,
        resolved_ids=tuple(resolved),
    )
