"""
Block grammar serializer.

Renders ``Block`` objects back into their canonical comment-delimited text.
"""

import json
from typing import Any, Dict, Iterable, Optional

from ..models import Block


CORE_NAMESPACE = "core/"

# Applied in order to the compact JSON so attributes can never close the
# surrounding HTML comment or be mangled by HTML filters.
_ATTRIBUTE_ESCAPES = (
    ("--", "\\u002d\\u002d"),
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ('\\"', "\\u0022"),
)


def strip_core_namespace(block_name: str) -> str:
    """Drop the implicit ``core/`` namespace from a block name."""
    if block_name.startswith(CORE_NAMESPACE):
        return block_name[len(CORE_NAMESPACE):]
    return block_name


def serialize_attributes(attributes: Dict[str, Any]) -> str:
    """Encode block attributes as they appear inside a delimiter comment."""
    encoded = json.dumps(attributes, ensure_ascii=False, separators=(",", ":"))
    for needle, replacement in _ATTRIBUTE_ESCAPES:
        encoded = encoded.replace(needle, replacement)
    return encoded


def comment_delimited_content(block_name: Optional[str], attributes: Dict[str, Any], content: str) -> str:
    """
    Wrap ``content`` in the delimiter comments for ``block_name``.

    Raw blocks (no name) return their content untouched. A named block with no
    content is written in the self-closing form.
    """
    if not block_name:
        return content

    name = strip_core_namespace(block_name)
    serialized_attributes = serialize_attributes(attributes) + " " if attributes else ""

    if not content:
        return f"<!-- wp:{name} {serialized_attributes}/-->"

    return f"<!-- wp:{name} {serialized_attributes}-->{content}<!-- /wp:{name} -->"


def render_block(block: Block) -> str:
    """
    Render one block, including its nested blocks, to canonical text.

    Args:
        block: The block to render

    Returns:
        The serialized block
    """
    content = ""
    inner_index = 0
    for chunk in block.inner_content:
        if chunk is None:
            content += render_block(block.inner_blocks[inner_index])
            inner_index += 1
        else:
            content += chunk

    return comment_delimited_content(block.name, block.attributes, content)


def render_blocks(blocks: Iterable[Block]) -> str:
    """Render a sequence of top-level blocks."""
    return "".join(render_block(block) for block in blocks)
