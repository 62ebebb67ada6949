"""
Block grammar parser.

Parses post content into a list of ``Block`` objects. Block boundaries are
HTML comments of the form::

    <!-- wp:namespace/name {"json": "attributes"} -->inner<!-- /wp:namespace/name -->
    <!-- wp:namespace/name {"json": "attributes"} /-->

The tokenizer only finds delimiter comments; nesting is resolved with an
explicit stack, and any text outside top-level blocks is kept as freeform
(nameless) blocks so that rendering the result reproduces the input.
"""

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..models import Block


DEFAULT_NAMESPACE = "core/"

# Attribute JSON may contain "}" as long as it is not followed by the end of
# the delimiter comment.
BLOCK_DELIMITER = re.compile(
    r"<!--\s+(?P<closer>/)?wp:(?P<namespace>[a-z][a-z0-9_-]*/)?(?P<name>[a-z][a-z0-9_-]*)\s+"
    r"(?P<attrs>\{(?:(?:[^}]+|\}+(?=\})|(?!\}\s+/?-->).)*+)?\}\s+)?(?P<void>/)?-->",
    re.DOTALL,
)

NO_MORE_TOKENS = "no-more-tokens"
VOID_BLOCK = "void-block"
BLOCK_OPENER = "block-opener"
BLOCK_CLOSER = "block-closer"


@dataclass
class _Frame:
    """An open block on the parser stack."""
    block: Block
    token_start: int
    token_length: int
    prev_offset: int
    leading_html_start: Optional[int] = None


class BlockParser:
    """
    Stack-based parser for block-delimited content.

    A parser instance is reusable; each call to :meth:`parse` resets its state.
    """

    def __init__(self):
        self.document = ""
        self.offset = 0
        self.output: List[Block] = []
        self.spans: List[Tuple[int, int]] = []
        self.stack: List[_Frame] = []

    def parse(self, document: str) -> List[Block]:
        """
        Parse ``document`` into top-level blocks.

        Args:
            document: Post content

        Returns:
            Top-level blocks, including freeform blocks for text between them
        """
        self.document = document
        self.offset = 0
        self.output = []
        self.spans = []
        self.stack = []

        while self._proceed():
            pass

        return self.output

    def parse_with_offsets(self, document: str) -> List[Tuple[Block, int, int]]:
        """
        Parse ``document`` and report where each top-level block came from.

        Returns:
            ``(block, start, end)`` triples; ``document[start:end]`` is the
            source text of the block
        """
        blocks = self.parse(document)
        return [(block, start, end) for block, (start, end) in zip(blocks, self.spans)]

    def _emit(self, block: Block, start: int, end: int) -> None:
        self.output.append(block)
        self.spans.append((start, end))

    def _proceed(self) -> bool:
        token_type, block_name, attrs, start_offset, token_length = self._next_token()
        stack_depth = len(self.stack)

        leading_html_start = None
        if start_offset is not None and start_offset > self.offset:
            leading_html_start = self.offset

        if token_type == NO_MORE_TOKENS:
            if stack_depth == 0:
                self._add_freeform()
                return False
            # Close whatever is still open at end of input.
            while self.stack:
                self._add_block_from_stack()
            return False

        if token_type == VOID_BLOCK:
            block = Block(name=block_name, attributes=attrs)
            if stack_depth == 0:
                if leading_html_start is not None:
                    self._emit(
                        Block.raw(self.document[leading_html_start:start_offset]),
                        leading_html_start,
                        start_offset
                    )
                self._emit(block, start_offset, start_offset + token_length)
            else:
                self._add_inner_block(block, start_offset, token_length)
            self.offset = start_offset + token_length
            return True

        if token_type == BLOCK_OPENER:
            self.stack.append(_Frame(
                block=Block(name=block_name, attributes=attrs),
                token_start=start_offset,
                token_length=token_length,
                prev_offset=start_offset + token_length,
                leading_html_start=leading_html_start,
            ))
            self.offset = start_offset + token_length
            return True

        # Block closer.
        if stack_depth == 0:
            # A closer with nothing open: give up and keep the rest as text.
            logging.debug(f"Unexpected block closer at offset {start_offset}")
            self._add_freeform()
            return False

        if stack_depth == 1:
            self._add_block_from_stack(start_offset, start_offset + token_length)
            self.offset = start_offset + token_length
            return True

        frame = self.stack.pop()
        html = self.document[frame.prev_offset:start_offset]
        frame.block.inner_html += html
        frame.block.inner_content.append(html)
        frame.prev_offset = start_offset + token_length
        self._add_inner_block(frame.block, frame.token_start, frame.token_length, start_offset + token_length)
        self.offset = start_offset + token_length
        return True

    def _next_token(self) -> Tuple[str, Optional[str], Dict[str, Any], Optional[int], Optional[int]]:
        match = BLOCK_DELIMITER.search(self.document, self.offset)
        if not match:
            return NO_MORE_TOKENS, None, {}, None, None

        started_at = match.start()
        length = match.end() - started_at
        is_closer = match.group("closer") is not None
        is_void = match.group("void") is not None
        namespace = match.group("namespace") or DEFAULT_NAMESPACE
        name = namespace + match.group("name")

        attrs: Dict[str, Any] = {}
        raw_attrs = match.group("attrs")
        if raw_attrs is not None and not is_closer:
            try:
                decoded = json.loads(raw_attrs)
            except json.JSONDecodeError as e:
                logging.warning(f"Ignoring invalid attributes on block {name} at offset {started_at}: {e}")
                decoded = {}
            if isinstance(decoded, dict):
                attrs = decoded
            else:
                logging.warning(f"Ignoring non-object attributes on block {name} at offset {started_at}")

        if is_void:
            return VOID_BLOCK, name, attrs, started_at, length
        if is_closer:
            return BLOCK_CLOSER, name, {}, started_at, length
        return BLOCK_OPENER, name, attrs, started_at, length

    def _add_freeform(self, length: Optional[int] = None) -> None:
        if length is None:
            length = len(self.document) - self.offset
        if not length:
            return
        self._emit(Block.raw(self.document[self.offset:self.offset + length]), self.offset, self.offset + length)

    def _add_inner_block(
        self,
        block: Block,
        token_start: int,
        token_length: int,
        last_offset: Optional[int] = None
    ) -> None:
        parent = self.stack[-1]
        parent.block.inner_blocks.append(block)
        html = self.document[parent.prev_offset:token_start]
        if html:
            parent.block.inner_html += html
            parent.block.inner_content.append(html)
        parent.block.inner_content.append(None)
        parent.prev_offset = last_offset if last_offset else token_start + token_length

    def _add_block_from_stack(self, end_offset: Optional[int] = None, block_end: Optional[int] = None) -> None:
        frame = self.stack.pop()
        if end_offset is None:
            html = self.document[frame.prev_offset:]
        else:
            html = self.document[frame.prev_offset:end_offset]
        if block_end is None:
            block_end = len(self.document)
        if html:
            frame.block.inner_html += html
            frame.block.inner_content.append(html)

        if frame.leading_html_start is not None:
            self._emit(
                Block.raw(self.document[frame.leading_html_start:frame.token_start]),
                frame.leading_html_start,
                frame.token_start
            )
        self._emit(frame.block, frame.token_start, block_end)


def parse_blocks(document: str) -> List[Block]:
    """Parse ``document`` with a fresh :class:`BlockParser`."""
    return BlockParser().parse(document)
