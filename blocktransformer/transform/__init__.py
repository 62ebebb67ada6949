"""Block encoding, decoding and nudging."""

from .codec import BlockCodec, KNOWN_PREFIXES, LEGACY_TOKEN_PREFIX, TOKEN_PREFIX
from .driver import BlockTransformer
from .scanner import TokenMatch, find_decodable_tokens, find_encodable_blocks, find_tokens, find_wrapped_tokens

__all__ = [
    "BlockCodec",
    "BlockTransformer",
    "KNOWN_PREFIXES",
    "LEGACY_TOKEN_PREFIX",
    "TOKEN_PREFIX",
    "TokenMatch",
    "find_encodable_blocks",
    "find_decodable_tokens",
    "find_tokens",
    "find_wrapped_tokens"
]
