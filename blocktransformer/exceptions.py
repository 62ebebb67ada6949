"""
Exception types for blocktransformer.

Per-unit and per-document errors are recovered by the transform driver and
only logged; ``SelectionError`` is fatal for a run and surfaces before any
document is touched.
"""

from typing import Optional


class TransformerError(Exception):
    """Base class for all blocktransformer errors."""


class MalformedTokenError(TransformerError):
    """An opaque token whose payload is not strict base64 or not UTF-8 text."""

    def __init__(self, token: str, reason: str):
        self.token = token
        self.reason = reason
        super().__init__(f"Malformed token {token[:60]!r}: {reason}")


class PersistenceError(TransformerError):
    """The document store failed to write a document back."""

    def __init__(self, document_id: int, reason: Optional[str] = None):
        self.document_id = document_id
        self.reason = reason
        message = f"Failed to persist document {document_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class SelectionError(TransformerError):
    """Invalid selection arguments, or a selection that matches nothing."""
