"""Post importers for loading a document store."""

from .base import BaseImporter
from .json_posts import JsonPostsImporter

__all__ = ["BaseImporter", "JsonPostsImporter"]
