"""
Opaque token codec.

A block is hidden from downstream content filters by rendering it to its
canonical text, base64-encoding that text and wrapping the result in a
bracketed token::

    [BT:PCEtLSB3cDpwYXJhZ3JhcGggLS0+...]

Tokens written by older runs use the ``[BLOCK-TRANSFORMER:`` prefix; both are
accepted when decoding.
"""

import base64
import binascii
import re
from typing import Callable, Optional

from ..exceptions import MalformedTokenError
from ..grammar import render_block
from ..models import Block


TOKEN_PREFIX = "[BT:"
LEGACY_TOKEN_PREFIX = "[BLOCK-TRANSFORMER:"
KNOWN_PREFIXES = (TOKEN_PREFIX, LEGACY_TOKEN_PREFIX)
TOKEN_SUFFIX = "]"

# The payload run stops at brackets and whitespace, so adjacent tokens never
# merge. Payloads outside the base64 alphabet still match and are rejected on
# decode.
TOKEN_PATTERN = re.compile(r"\[(?:BT|BLOCK-TRANSFORMER):(?P<payload>[^\[\]\s]+)\]")


class BlockCodec:
    """
    Converts blocks to opaque tokens and tokens back to block text.
    """

    def __init__(self, prefix: str = TOKEN_PREFIX, renderer: Optional[Callable[[Block], str]] = None):
        """
        Initialize the codec.

        Args:
            prefix: Token prefix written by :meth:`encode`
            renderer: Block renderer; defaults to the canonical grammar renderer

        Raises:
            ValueError: If ``prefix`` is not a known token prefix
        """
        if prefix not in KNOWN_PREFIXES:
            raise ValueError(f"Unknown token prefix {prefix!r}; expected one of {', '.join(KNOWN_PREFIXES)}")
        self.prefix = prefix
        self.renderer = renderer or render_block

    def encode(self, block: Block) -> str:
        """
        Encode ``block`` as an opaque token.

        Args:
            block: The block to hide

        Returns:
            The token string
        """
        serialized = self.renderer(block)
        payload = base64.b64encode(serialized.encode("utf-8")).decode("ascii")
        return f"{self.prefix}{payload}{TOKEN_SUFFIX}"

    def decode(self, token: str) -> str:
        """
        Decode an opaque token back to the block text it carries.

        The text is returned with one leading and one trailing newline so it
        cannot run into whatever surrounds the token.

        Args:
            token: A complete token, prefix and suffix included

        Returns:
            The decoded text, newline framed

        Raises:
            MalformedTokenError: If the token does not match the token format,
                or its payload is not strict base64 or not UTF-8 text
        """
        match = TOKEN_PATTERN.fullmatch(token)
        if not match:
            raise MalformedTokenError(token, "not a block token")

        try:
            raw = base64.b64decode(match.group("payload"), validate=True)
        except binascii.Error as e:
            raise MalformedTokenError(token, f"invalid base64 payload ({e})") from e

        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedTokenError(token, "payload is not UTF-8 text") from e

        return f"\n{text}\n"

    @staticmethod
    def contains_token(text: str) -> bool:
        """Whether ``text`` contains anything that starts like a token."""
        return any(prefix in text for prefix in KNOWN_PREFIXES)
