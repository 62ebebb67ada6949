"""Block grammar: parsing and rendering of comment-delimited blocks."""

from .parser import BlockParser, parse_blocks
from .serializer import render_block, render_blocks, serialize_attributes

__all__ = ["BlockParser", "parse_blocks", "render_block", "render_blocks", "serialize_attributes"]
