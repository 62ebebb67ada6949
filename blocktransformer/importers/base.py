"""
Base importer interface for blocktransformer.

This module defines the abstract interface that all post importers must implement.
"""

from abc import ABC, abstractmethod
from typing import List

from ..models import Document


class BaseImporter(ABC):
    """
    Abstract base class for all post importers.

    Each importer reads posts from a specific source format and converts them
    into ``Document`` objects that can be loaded into a document store.
    """

    @abstractmethod
    def get_all_documents(self) -> List[Document]:
        """
        Retrieve all posts from the source.

        Returns:
            List of Document objects
        """
        pass
