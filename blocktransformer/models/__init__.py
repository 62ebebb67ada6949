"""Data models for blocktransformer."""

from .blocks import Block
from .documents import Direction, Document, RunReport, SelectionRange, TransformResult

__all__ = [
    "Block",
    "Direction",
    "Document",
    "RunReport",
    "SelectionRange",
    "TransformResult"
]
