"""
Document store interface for blocktransformer.

The transform driver only reads and writes post content through this
interface, so any backend that can answer these three calls will do.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..models import Document


class DocumentStore(ABC):
    """
    Abstract base class for document stores.
    """

    @abstractmethod
    def get_document_ids(
        self,
        post_types: Sequence[str],
        post_status: str,
        min_id: int = 0,
        max_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[int]:
        """
        Select document IDs matching the filters.

        Args:
            post_types: Post types to include
            post_status: Post status to include
            min_id: Lowest ID, inclusive
            max_id: Highest ID, inclusive; None for no upper bound
            limit: Maximum number of IDs; None for no limit

        Returns:
            Matching IDs in descending order
        """
        pass

    @abstractmethod
    def get_document(self, document_id: int) -> Optional[Document]:
        """
        Fetch one document.

        Returns:
            The document if found, None otherwise
        """
        pass

    @abstractmethod
    def update_document(self, document_id: int, text: str) -> bool:
        """
        Write new content for a document.

        Returns:
            True if the document was updated, False if no row was affected

        Raises:
            PersistenceError: If the backend failed to write
        """
        pass
