"""
HTML serializer for the document model.

Renders nodes to the article transport format and parses stored article
HTML back into nodes so existing articles can be edited.

Supported formats mirror the editor toolbar:
- blocks: paragraph, header (h1-h6), blockquote, ordered/bullet list
- inline: bold, italic, underline, strike, link
- embeds: <img>, with ``data-temp-id`` while staged
"""

from __future__ import annotations

import html
from typing import Any, Dict, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString

from .model import TRACKING_ATTRIBUTE, Embed, Node, TextRun

BLOCK_KEYS = ("header", "blockquote", "list")

# Inline marks, outermost first (link wraps the rest)
INLINE_TAGS = (
    ("bold", "strong"),
    ("italic", "em"),
    ("underline", "u"),
    ("strike", "s"),
)

# Parser: tag → inline attribute
INLINE_FROM_TAG = {
    "strong": "bold",
    "b": "bold",
    "em": "italic",
    "i": "italic",
    "u": "underline",
    "s": "strike",
    "strike": "strike",
    "del": "strike",
}

BLOCK_TAGS = {"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "li"}


# ── Rendering ────────────────────────────────────────────────────


def _render_inline(text: str, attributes: Dict[str, Any]) -> str:
    out = html.escape(text, quote=False)
    for key, tag in reversed(INLINE_TAGS):
        if attributes.get(key):
            out = f"<{tag}>{out}</{tag}>"
    link = attributes.get("link")
    if link:
        out = f'<a href="{html.escape(str(link))}">{out}</a>'
    return out


def _render_embed(embed: Embed) -> str:
    parts = [f'<img src="{html.escape(embed.src)}"']
    if embed.alt:
        parts.append(f' alt="{html.escape(embed.alt)}"')
    if embed.tracking_id:
        parts.append(f' {TRACKING_ATTRIBUTE}="{html.escape(embed.tracking_id)}"')
    parts.append(">")
    return "".join(parts)


def _lines(nodes: Sequence[Node]) -> List[Tuple[str, Dict[str, Any]]]:
    """Split nodes into ``(inner_html, block_attributes)`` lines."""
    lines: List[Tuple[str, Dict[str, Any]]] = []
    current: List[str] = []
    for node in nodes:
        if isinstance(node, Embed):
            current.append(_render_embed(node))
            continue
        segments = node.text.split("\n")
        for i, segment in enumerate(segments):
            if segment:
                current.append(_render_inline(segment, node.attributes))
            if i < len(segments) - 1:
                block = {k: node.attributes[k] for k in BLOCK_KEYS if node.attributes.get(k)}
                lines.append(("".join(current), block))
                current = []
    if current:
        lines.append(("".join(current), {}))
    return lines


def render_html(nodes: Sequence[Node]) -> str:
    """Render document nodes to HTML."""
    out: List[str] = []
    open_list: Optional[str] = None

    for inner, block in _lines(nodes):
        list_type = block.get("list")
        list_tag = "ol" if list_type == "ordered" else "ul" if list_type else None
        if open_list and open_list != list_tag:
            out.append(f"</{open_list}>")
            open_list = None
        if list_tag and not open_list:
            out.append(f"<{list_tag}>")
            open_list = list_tag

        body = inner or "<br>"
        if list_tag:
            out.append(f"<li>{body}</li>")
        elif block.get("header"):
            level = min(6, max(1, int(block["header"])))
            out.append(f"<h{level}>{body}</h{level}>")
        elif block.get("blockquote"):
            out.append(f"<blockquote>{body}</blockquote>")
        else:
            out.append(f"<p>{body}</p>")

    if open_list:
        out.append(f"</{open_list}>")
    return "".join(out)


# ── Parsing ──────────────────────────────────────────────────────

HEADER_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LIST_TAGS = {"ol": "ordered", "ul": "bullet"}


def _block_attributes(tag: str, outer: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if tag in HEADER_TAGS:
        return {"header": int(tag[1])}
    if tag == "blockquote":
        return {"blockquote": True}
    if tag == "li":
        return {"list": (outer or {}).get("list", "bullet")}
    # <p>/<div> take the formatting of the block they sit in (<li><p>)
    return dict(outer or {})


def _has_content_after(node: PageElement) -> bool:
    """True when something other than whitespace follows ``node`` in its block."""
    while node is not None:
        for sibling in node.next_siblings:
            if isinstance(sibling, PreformattedString):
                continue
            if isinstance(sibling, Tag) or sibling.strip():
                return True
        node = node.parent
        if node is None or node.name in BLOCK_TAGS or node.name in LIST_TAGS:
            return False
    return False


class _DocumentReader:
    """Walks a parsed tree, ending every line with a ``\\n`` run."""

    def __init__(self) -> None:
        self.nodes: List[Node] = []
        self._line_open = False

    def read(self, root: Tag) -> List[Node]:
        self._children(root, None, {})
        self._end_open_line(None)
        return self.nodes

    def _end_line(self, block: Optional[Dict[str, Any]]) -> None:
        self.nodes.append(TextRun("\n", dict(block or {})))
        self._line_open = False

    def _end_open_line(self, block: Optional[Dict[str, Any]]) -> None:
        if self._line_open:
            self._end_line(block)

    def _children(self, parent: Tag, block: Optional[Dict[str, Any]], inline: Dict[str, Any]) -> None:
        for child in parent.children:
            self._node(child, block, inline)

    def _block(self, element: Tag, attributes: Dict[str, Any]) -> None:
        start = len(self.nodes)
        self._children(element, attributes, {})
        if self._line_open or len(self.nodes) == start:
            self._end_line(attributes)

    def _list(self, element: Tag, list_type: str) -> None:
        attributes = {"list": list_type}
        for child in element.children:
            if isinstance(child, Tag) and child.name in LIST_TAGS:
                self._node(child, attributes, {})
            elif isinstance(child, Tag):
                self._end_open_line(attributes)
                self._block(child, _block_attributes(child.name, attributes))
            else:
                self._node(child, attributes, {})
        self._end_open_line(attributes)

    def _node(self, node: PageElement, block: Optional[Dict[str, Any]], inline: Dict[str, Any]) -> None:
        if isinstance(node, PreformattedString):
            return
        if isinstance(node, NavigableString):
            text = str(node)
            if text.strip() or self._line_open:
                self.nodes.append(TextRun(text, dict(inline)))
                self._line_open = True
            return
        if not isinstance(node, Tag):
            return

        name = node.name
        if name in LIST_TAGS:
            self._end_open_line(block)
            self._list(node, LIST_TAGS[name])
        elif name in BLOCK_TAGS:
            self._end_open_line(block)
            self._block(node, _block_attributes(name, block))
        elif name == "br":
            # A trailing <br> only keeps an empty block open (<p><br></p>)
            if _has_content_after(node):
                self._end_line(block)
        elif name == "img":
            self.nodes.append(Embed(
                src=node.get("src", ""),
                tracking_id=node.get(TRACKING_ATTRIBUTE) or None,
                alt=node.get("alt", ""),
            ))
            self._line_open = True
        elif name == "a":
            self._children(node, block, dict(inline, link=node.get("href", "")))
        elif name in INLINE_FROM_TAG:
            self._children(node, block, dict(inline, **{INLINE_FROM_TAG[name]: True}))
        else:
            self._children(node, block, inline)


def parse_html(markup: str) -> List[Node]:
    """Parse article HTML into document nodes."""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return _DocumentReader().read(soup)
