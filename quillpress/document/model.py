"""
Document Model — Immutable snapshot of an article body under edit.

The body is an ordered sequence of nodes, Quill-delta style:

- ``TextRun``: a run of text with formatting attributes. Newline
  characters terminate blocks; the run holding a newline carries the
  block format (header, blockquote, list) for the line it ends.
- ``Embed``: an image. ``tracking_id`` is set only while the image is
  staged locally and refers to an entry in the pending upload registry.

## Offsets

Positions are computed by walking the nodes from the start with a
running offset: a text run advances it by its length, an embed by one.
Every edit returns a new ``Document``; nothing is mutated in place, so a
snapshot taken at save time cannot be disturbed by later edits.

## Usage

    from quillpress.document import Document, Embed

    doc = Document.from_html("<p>Hello</p>")
    doc = doc.insert_embed(5, Embed(src="data:image/png;base64,...", tracking_id="t1"))
    doc.tracking_ids()   # ["t1"]
    doc.to_html()        # '<p>Hello<img src="data:..." data-temp-id="t1"></p>'
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

# Delta attribute carrying the tracking id of a staged image
TRACKING_ATTRIBUTE = "data-temp-id"

DATA_URI_PREFIX = "data:"


@dataclass(frozen=True)
class TextRun:
    """A run of text sharing the same attributes."""

    text: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class Embed:
    """An image embedded in the document."""

    src: str
    tracking_id: Optional[str] = None
    alt: str = ""

    @property
    def length(self) -> int:
        return 1

    @property
    def is_staged(self) -> bool:
        return self.tracking_id is not None

    @property
    def is_inline_data(self) -> bool:
        return self.src.startswith(DATA_URI_PREFIX)

    def resolved(self, public_url: str) -> "Embed":
        """Return a copy pointing at its permanent URL, untracked."""
        return replace(self, src=public_url, tracking_id=None)


Node = Union[TextRun, Embed]


def _normalize(nodes: Sequence[Node]) -> Tuple[Node, ...]:
    """Drop empty runs and merge adjacent runs with equal attributes."""
    result: List[Node] = []
    for node in nodes:
        if isinstance(node, TextRun):
            if not node.text:
                continue
            prev = result[-1] if result else None
            if isinstance(prev, TextRun) and prev.attributes == node.attributes:
                result[-1] = TextRun(prev.text + node.text, prev.attributes)
                continue
        result.append(node)
    return tuple(result)


class Document:
    """An immutable sequence of text runs and embeds."""

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Sequence[Node] = ()):
        self._nodes = _normalize(nodes)

    def __repr__(self) -> str:
        return f"Document({list(self._nodes)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return self._nodes == other._nodes

    def __hash__(self) -> int:
        return hash(self.to_html())

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def length(self) -> int:
        """Total length in offset units (text characters + embeds)."""
        return sum(node.length for node in self._nodes)

    # ── Queries ──────────────────────────────────────────────────

    def walk(self) -> Iterator[Tuple[int, Node]]:
        """Yield ``(offset, node)`` pairs from the start of the document."""
        offset = 0
        for node in self._nodes:
            yield offset, node
            offset += node.length

    def embeds(self) -> List[Tuple[int, Embed]]:
        """All embeds with their offsets, in document order."""
        return [(offset, node) for offset, node in self.walk() if isinstance(node, Embed)]

    def tracking_ids(self) -> List[str]:
        """Tracking ids of staged images, in document order."""
        return [embed.tracking_id for _, embed in self.embeds() if embed.tracking_id]

    def find_untracked(self, src: str, start: int = 0, end: Optional[int] = None) -> Optional[int]:
        """Offset of the first untracked embed with this ``src`` in ``[start, end)``."""
        for offset, embed in self.embeds():
            if offset < start or embed.src != src or embed.is_staged:
                continue
            if end is not None and offset >= end:
                break
            return offset
        return None

    def plain_text(self) -> str:
        return "".join(node.text for node in self._nodes if isinstance(node, TextRun))

    def has_content(self) -> bool:
        """True if the document holds any visible text or any image."""
        return bool(self.plain_text().strip()) or bool(self.embeds())

    # ── Edits ────────────────────────────────────────────────────

    def _clamp(self, position: int) -> int:
        return max(0, min(position, self.length))

    def _split(self, position: int) -> Tuple[List[Node], List[Node]]:
        before: List[Node] = []
        after: List[Node] = []
        for offset, node in self.walk():
            end = offset + node.length
            if end <= position:
                before.append(node)
            elif offset >= position:
                after.append(node)
            else:
                # Only text runs can straddle a position
                cut = position - offset
                before.append(TextRun(node.text[:cut], node.attributes))
                after.append(TextRun(node.text[cut:], node.attributes))
        return before, after

    def insert(self, position: int, node: Node) -> "Document":
        """Insert a node at ``position`` (clamped to the document bounds)."""
        before, after = self._split(self._clamp(position))
        return Document(before + [node] + after)

    def insert_embed(self, position: int, embed: Embed) -> "Document":
        return self.insert(position, embed)

    def insert_text(
        self,
        position: int,
        text: str,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> "Document":
        return self.insert(position, TextRun(text, dict(attributes or {})))

    def delete(self, position: int, length: int = 1) -> "Document":
        """Delete ``length`` offset units starting at ``position``."""
        start = self._clamp(position)
        end = self._clamp(position + max(0, length))
        before, rest = self._split(start)
        _, after = Document(rest)._split(end - start)
        return Document(before + after)

    def map_embeds(self, fn: Callable[[Embed], Embed]) -> "Document":
        """Return a document with every embed replaced by ``fn(embed)``."""
        return Document([fn(n) if isinstance(n, Embed) else n for n in self._nodes])

    # ── Serialization ────────────────────────────────────────────

    def to_delta(self) -> Dict[str, Any]:
        """Serialize to a Quill delta (``{"ops": [...]}``)."""
        ops: List[Dict[str, Any]] = []
        for node in self._nodes:
            if isinstance(node, TextRun):
                op: Dict[str, Any] = {"insert": node.text}
                if node.attributes:
                    op["attributes"] = dict(node.attributes)
            else:
                op = {"insert": {"image": node.src}}
                attrs: Dict[str, Any] = {}
                if node.alt:
                    attrs["alt"] = node.alt
                if node.tracking_id:
                    attrs[TRACKING_ATTRIBUTE] = node.tracking_id
                if attrs:
                    op["attributes"] = attrs
            ops.append(op)
        return {"ops": ops}

    @classmethod
    def from_delta(cls, delta: Union[Dict[str, Any], Sequence[Dict[str, Any]]]) -> "Document":
        """Build a document from a Quill delta or its list of insert ops."""
        ops = delta.get("ops", []) if isinstance(delta, dict) else delta
        nodes: List[Node] = []
        for op in ops:
            insert = op.get("insert")
            attrs = dict(op.get("attributes") or {})
            if isinstance(insert, str):
                nodes.append(TextRun(insert, attrs))
            elif isinstance(insert, dict) and "image" in insert:
                nodes.append(Embed(
                    src=insert["image"],
                    tracking_id=attrs.get(TRACKING_ATTRIBUTE),
                    alt=attrs.get("alt", ""),
                ))
            else:
                raise ValueError(f"Unsupported delta op: {op!r}")
        return cls(nodes)

    def to_html(self) -> str:
        from .serializer import render_html

        return render_html(self._nodes)

    @classmethod
    def from_html(cls, markup: str) -> "Document":
        from .serializer import parse_html

        return cls(parse_html(markup))
