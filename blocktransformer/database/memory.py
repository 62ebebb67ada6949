"""
In-memory document store, used by tests and for trying transforms on
documents loaded from a file.
"""

from typing import Dict, Iterable, List, Optional, Sequence

from ..models import Document
from .base import DocumentStore


class InMemoryDocumentStore(DocumentStore):
    """
    Document store backed by a dictionary keyed by document ID.
    """

    def __init__(self, documents: Optional[Iterable[Document]] = None):
        self._documents: Dict[int, Document] = {}
        self.update_calls: List[int] = []
        for document in documents or []:
            self.add_document(document)

    def add_document(self, document: Document) -> None:
        self._documents[document.id] = document.model_copy()

    def get_document_ids(
        self,
        post_types: Sequence[str],
        post_status: str,
        min_id: int = 0,
        max_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[int]:
        ids = sorted(
            (
                doc.id for doc in self._documents.values()
                if doc.post_type in post_types
                and doc.post_status == post_status
                and doc.id >= min_id
                and (max_id is None or doc.id <= max_id)
            ),
            reverse=True,
        )
        if limit is not None:
            ids = ids[:limit]
        return ids

    def get_document(self, document_id: int) -> Optional[Document]:
        document = self._documents.get(document_id)
        return document.model_copy() if document else None

    def update_document(self, document_id: int, text: str) -> bool:
        self.update_calls.append(document_id)
        document = self._documents.get(document_id)
        if document is None:
            return False
        document.text = text
        return True
