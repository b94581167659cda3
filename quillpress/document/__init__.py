"""
Document Module — Immutable article body model and its serializers.
"""

from .model import DATA_URI_PREFIX, TRACKING_ATTRIBUTE, Document, Embed, Node, TextRun

__all__ = [
    "DATA_URI_PREFIX",
    "Document",
    "Embed",
    "Node",
    "TextRun",
    "TRACKING_ATTRIBUTE",
]
