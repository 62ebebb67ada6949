"""
JSON posts importer for blocktransformer.

Reads posts exported as a JSON array, as an object with a ``posts`` array, or
as JSON Lines (one post object per line). Field names follow the WordPress
``wp_posts`` columns, with short aliases accepted::

    {"ID": 123, "post_type": "post", "post_status": "publish", "post_content": "..."}
    {"id": 124, "content": "..."}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..models import Document
from .base import BaseImporter


class JsonPostsImporter(BaseImporter):
    """
    Importer for JSON and JSON Lines post exports.
    """

    def __init__(self, path: str):
        """
        Initialize the importer.

        Args:
            path: Path to the export file

        Raises:
            FileNotFoundError: If the file does not exist
        """
        self.path = Path(path)
        if not self.path.is_file():
            raise FileNotFoundError(f"Posts file not found: {self.path}")

        logging.info(f"Initialized JSON posts importer for: {self.path}")

    def get_all_documents(self) -> List[Document]:
        """
        Read every valid post from the file.

        Records that cannot be converted are logged and skipped.

        Returns:
            List of documents, in file order
        """
        with open(self.path, "r", encoding="utf-8") as f:
            content = f.read()

        documents = []
        for position, record in enumerate(self._iter_records(content), 1):
            document = self._to_document(record, position)
            if document is not None:
                documents.append(document)

        logging.info(f"Loaded {len(documents)} posts from {self.path}")
        return documents

    def _iter_records(self, content: str) -> Iterable[Any]:
        stripped = content.lstrip()
        if not stripped:
            return []

        if stripped[0] in "[{":
            try:
                data = json.loads(stripped)
            except json.JSONDecodeError:
                # A file of one-object-per-line also starts with "{".
                data = None
            if isinstance(data, list):
                return data
            if isinstance(data, dict):
                return data.get("posts", [data])

        return self._iter_lines(content)

    def _iter_lines(self, content: str) -> Iterable[Any]:
        for line_number, line in enumerate(content.splitlines(), 1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError as e:
                logging.warning(f"Skipping invalid JSON on line {line_number} of {self.path}: {e}")

    def _to_document(self, record: Any, position: int) -> Optional[Document]:
        if not isinstance(record, dict):
            logging.warning(f"Skipping record {position}: expected an object, got {type(record).__name__}")
            return None

        values: Dict[str, Any] = {
            "id": record.get("ID", record.get("id")),
            "text": record.get("post_content", record.get("content", "")),
        }
        for key in ("post_type", "post_status"):
            if record.get(key):
                values[key] = record[key]

        try:
            return Document(**values)
        except ValidationError as e:
            logging.warning(f"Skipping record {position}: {e.errors()[0]['msg']}")
            return None
