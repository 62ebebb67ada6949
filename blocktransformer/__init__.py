"""
blocktransformer: hide content blocks from content converters, and bring them back.

Encodes the blocks of stored posts as opaque base64 tokens so a downstream
content pipeline leaves them alone, then decodes them again afterwards.
"""

__version__ = "0.1.0"
__author__ = "blocktransformer Project"

# Import main components
from .config import ConfigManager
from .database import DatabaseManager, DocumentStore, InMemoryDocumentStore
from .exceptions import MalformedTokenError, PersistenceError, SelectionError, TransformerError
from .grammar import BlockParser, render_block, render_blocks
from .importers import BaseImporter, JsonPostsImporter
from .models import Block, Direction, Document, RunReport, SelectionRange, TransformResult
from .transform import BlockCodec, BlockTransformer

__all__ = [
    "ConfigManager",
    "DatabaseManager",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MalformedTokenError",
    "PersistenceError",
    "SelectionError",
    "TransformerError",
    "BlockParser",
    "render_block",
    "render_blocks",
    "BaseImporter",
    "JsonPostsImporter",
    "Block",
    "Direction",
    "Document",
    "RunReport",
    "SelectionRange",
    "TransformResult",
    "BlockCodec",
    "BlockTransformer"
]
