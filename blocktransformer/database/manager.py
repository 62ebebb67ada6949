"""
Database manager for blocktransformer.

This module stores posts in DuckDB and implements the document store used by
the transform driver.
"""

import duckdb
from typing import List, Optional, Sequence
from datetime import datetime

from ..exceptions import PersistenceError
from ..models import Document
from .base import DocumentStore


class DatabaseManager(DocumentStore):
    """
    Manages the DuckDB database holding post content.
    """

    def __init__(self, db_path: str = "blocktransformer.db"):
        """
        Initialize the database manager.

        Args:
            db_path: Path to the DuckDB database file
        """
        self.db_path = db_path
        self.connection = None

    def connect(self):
        """Establish connection to the database."""
        self.connection = duckdb.connect(self.db_path)

    def disconnect(self):
        """Close the database connection."""
        if self.connection:
            self.connection.close()
            self.connection = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()

    def _require_connection(self):
        if not self.connection:
            raise RuntimeError("Database connection not established")
        return self.connection

    def initialize_database(self):
        """
        Create the posts table if it doesn't exist.
        """
        connection = self._require_connection()
        connection.execute("""
            CREATE TABLE IF NOT EXISTS posts (
                id BIGINT PRIMARY KEY,
                post_type VARCHAR NOT NULL DEFAULT 'post',
                post_status VARCHAR NOT NULL DEFAULT 'publish',
                post_content TEXT NOT NULL DEFAULT '',
                modified_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    def add_document(self, document: Document) -> None:
        """
        Insert a document, replacing any existing row with the same ID.

        Args:
            document: The document to store
        """
        connection = self._require_connection()
        connection.execute("""
            INSERT OR REPLACE INTO posts (id, post_type, post_status, post_content, modified_at)
            VALUES (?, ?, ?, ?, ?)
        """, [
            document.id,
            document.post_type,
            document.post_status,
            document.text,
            datetime.now()
        ])

    def get_document_ids(
        self,
        post_types: Sequence[str],
        post_status: str,
        min_id: int = 0,
        max_id: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[int]:
        """
        Select post IDs matching the filters, newest first.

        Args:
            post_types: Post types to include
            post_status: Post status to include
            min_id: Lowest ID, inclusive
            max_id: Highest ID, inclusive; None for no upper bound
            limit: Maximum number of IDs; None for no limit

        Returns:
            Matching IDs in descending order
        """
        connection = self._require_connection()
        if not post_types:
            return []

        placeholders = ", ".join("?" for _ in post_types)
        query = f"""
            SELECT id FROM posts
            WHERE post_type IN ({placeholders})
              AND post_status = ?
              AND id >= ?
        """
        params: list = [*post_types, post_status, min_id]

        if max_id is not None:
            query += " AND id <= ?"
            params.append(max_id)

        query += " ORDER BY id DESC"

        if limit is not None:
            query += f" LIMIT {int(limit)}"

        results = connection.execute(query, params).fetchall()
        return [row[0] for row in results]

    def get_document(self, document_id: int) -> Optional[Document]:
        """
        Retrieve a post by ID.

        Args:
            document_id: The post ID

        Returns:
            The document if found, None otherwise
        """
        connection = self._require_connection()
        result = connection.execute("""
            SELECT id, post_content, post_type, post_status
            FROM posts
            WHERE id = ?
        """, [document_id]).fetchone()

        if result:
            return Document(
                id=result[0],
                text=result[1],
                post_type=result[2],
                post_status=result[3]
            )
        return None

    def update_document(self, document_id: int, text: str) -> bool:
        """
        Write new content for a post.

        Args:
            document_id: The post ID
            text: The new post content

        Returns:
            True if the post was updated, False if it does not exist

        Raises:
            PersistenceError: If DuckDB rejected the write
        """
        connection = self._require_connection()
        try:
            exists = connection.execute(
                "SELECT 1 FROM posts WHERE id = ? LIMIT 1",
                [document_id]
            ).fetchone()
            if not exists:
                return False

            connection.execute("""
                UPDATE posts
                SET post_content = ?, modified_at = ?
                WHERE id = ?
            """, [text, datetime.now(), document_id])
            return True
        except duckdb.Error as e:
            raise PersistenceError(document_id, str(e)) from e

    def count_documents(self) -> int:
        """Return the number of stored posts."""
        connection = self._require_connection()
        result = connection.execute("SELECT COUNT(*) FROM posts").fetchone()
        return result[0] if result else 0

    def list_documents(self) -> List[Document]:
        """
        List all posts ordered by ID.

        Returns:
            List of documents
        """
        connection = self._require_connection()
        results = connection.execute("""
            SELECT id, post_content, post_type, post_status
            FROM posts
            ORDER BY id
        """).fetchall()

        return [
            Document(id=row[0], text=row[1], post_type=row[2], post_status=row[3])
            for row in results
        ]
