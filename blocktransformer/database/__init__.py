"""Document stores for blocktransformer."""

from .base import DocumentStore
from .manager import DatabaseManager
from .memory import InMemoryDocumentStore

__all__ = ["DocumentStore", "DatabaseManager", "InMemoryDocumentStore"]
