"""
Clients — HTTP collaborators for storage and articles.
"""

from .articles import ArticleClient
from .storage import StorageClient

__all__ = ["ArticleClient", "StorageClient"]
