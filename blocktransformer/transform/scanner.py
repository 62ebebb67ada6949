"""
Locates the units a transform works on.

Encoding works on the top-level blocks produced by the block grammar parser.
Decoding works on tokens, looked for only where encoding puts them: in the
text between top-level blocks, and in top-level paragraphs that older runs
wrapped around a single token.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..models import Block
from .codec import TOKEN_PATTERN, BlockCodec


PARAGRAPH_BLOCK = "core/paragraph"

WRAPPED_TOKEN_PATTERN = re.compile(r"\s*<p>\s*(?P<token>" + TOKEN_PATTERN.pattern + r")\s*</p>\s*")


@dataclass(frozen=True)
class TokenMatch:
    """A token occurrence in a document, with its exact boundaries."""
    start: int
    end: int
    text: str
    payload: str


def find_tokens(text: str) -> List[TokenMatch]:
    """
    Find all non-overlapping tokens in ``text``, left to right.

    Args:
        text: Document text

    Returns:
        Token matches; empty when there are none
    """
    return [
        TokenMatch(start=m.start(), end=m.end(), text=m.group(0), payload=m.group("payload"))
        for m in TOKEN_PATTERN.finditer(text)
    ]


def find_encodable_blocks(blocks: Sequence[Block]) -> List[Tuple[int, Block]]:
    """
    Select the top-level blocks that encoding should replace.

    Raw text between blocks has no structured form and is skipped, as is any
    block already carrying a token.

    Returns:
        ``(index, block)`` pairs into ``blocks``
    """
    return [
        (index, block)
        for index, block in enumerate(blocks)
        if not block.is_raw and not BlockCodec.contains_token(block.inner_html)
    ]


def _wrapped_token(block: Block) -> Optional[re.Match]:
    if block.name != PARAGRAPH_BLOCK or block.inner_blocks:
        return None
    return WRAPPED_TOKEN_PATTERN.fullmatch(block.inner_html)


def find_wrapped_tokens(blocks: Sequence[Block]) -> List[Tuple[int, str]]:
    """
    Find paragraph blocks whose only content is a single token.

    Older runs wrapped each token in a paragraph block; decoding replaces the
    whole paragraph rather than just the token inside it.

    Returns:
        ``(index, token)`` pairs into ``blocks``
    """
    found = []
    for index, block in enumerate(blocks):
        match = _wrapped_token(block)
        if match:
            found.append((index, match.group("token")))
    return found


def find_decodable_tokens(text: str, entries: Sequence[Tuple[Block, int, int]]) -> List[TokenMatch]:
    """
    Find the tokens decoding should replace, left to right.

    Tokens inside any other block are the author's text, not something an
    encode wrote, and are never reported. For a paragraph-wrapped token the
    match covers the whole paragraph.

    Args:
        text: Document text
        entries: ``(block, start, end)`` triples from
            :meth:`BlockParser.parse_with_offsets` for ``text``

    Returns:
        Non-overlapping token matches with offsets into ``text``
    """
    spans = [(start, end) for _, start, end in entries]
    found = []
    for block, start, end in entries:
        # Blocks left open at the end of the document are reported along with
        # the blocks nested in them.
        if any(s <= start and end <= e and (s, e) != (start, end) for s, e in spans):
            continue

        if block.is_raw:
            found.extend(
                TokenMatch(start=start + m.start, end=start + m.end, text=m.text, payload=m.payload)
                for m in find_tokens(text[start:end])
            )
            continue

        match = _wrapped_token(block)
        if match:
            found.append(TokenMatch(start=start, end=end, text=match.group("token"), payload=match.group("payload")))

    return sorted(found, key=lambda m: m.start)
