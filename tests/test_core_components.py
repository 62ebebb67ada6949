"""
Unit tests for core blocktransformer components.

Tests configuration management, data models and the DuckDB document store.
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from blocktransformer.config import ConfigManager
from blocktransformer.database import DatabaseManager
from blocktransformer.exceptions import MalformedTokenError, PersistenceError, SelectionError
from blocktransformer.models import Block, Direction, Document, RunReport, SelectionRange
from blocktransformer.transform import BlockTransformer


class TestConfigManager(unittest.TestCase):
    """Test configuration management functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_config_creation_with_defaults(self):
        """Test config manager falls back to defaults when file missing."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.database_filename, "blocktransformer.db")
        self.assertEqual(config.log_filename, "blocktransformer.log")
        self.assertEqual(config.token_prefix, "[BT:")
        self.assertEqual(config.progress_interval, 25)
        self.assertEqual(config.post_types, ["post"])
        self.assertEqual(config.post_status, "publish")

    def test_config_loading_from_file(self):
        """Test loading configuration from YAML file."""
        test_config = """
database:
  filename: "test.db"

transform:
  token_prefix: "[BLOCK-TRANSFORMER:"
  progress_interval: 10

selection:
  post_types: ["post", "page"]
"""
        with open(self.config_path, 'w') as f:
            f.write(test_config)

        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.database_filename, "test.db")
        self.assertEqual(config.token_prefix, "[BLOCK-TRANSFORMER:")
        self.assertEqual(config.progress_interval, 10)
        self.assertEqual(config.post_types, ["post", "page"])
        # Keys the file leaves out keep their defaults
        self.assertEqual(config.post_status, "publish")
        self.assertEqual(config.get("logging.level"), "INFO")

    def test_dot_notation_access(self):
        """Test accessing config values with dot notation."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.get("transform.progress_interval"), 25)
        self.assertEqual(config.get("selection.post_status"), "publish")
        self.assertEqual(config.get("nonexistent.key", "default"), "default")
        self.assertEqual(config.get_section("database"), {"filename": "blocktransformer.db"})
        self.assertEqual(config.get_section("missing"), {})

    def test_config_reload(self):
        """Test configuration reloading."""
        with open(self.config_path, 'w') as f:
            f.write("database:\n  filename: 'one.db'")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.database_filename, "one.db")

        with open(self.config_path, 'w') as f:
            f.write("database:\n  filename: 'two.db'")

        config.reload()
        self.assertEqual(config.database_filename, "two.db")

    def test_invalid_yaml_falls_back_to_defaults(self):
        """Test that a broken config file does not stop the tool."""
        with open(self.config_path, 'w') as f:
            f.write("database: [unclosed")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.database_filename, "blocktransformer.db")

    def test_non_mapping_config_falls_back_to_defaults(self):
        with open(self.config_path, 'w') as f:
            f.write("- just\n- a list\n")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.token_prefix, "[BT:")

    def test_post_types_as_comma_string(self):
        with open(self.config_path, 'w') as f:
            f.write("selection:\n  post_types: 'post, page'")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.post_types, ["post", "page"])


class TestDataModels(unittest.TestCase):
    """Test data model validation and functionality."""

    def test_block_creation(self):
        """Test Block model creation with nested blocks."""
        child = Block(name="core/paragraph", inner_html="<p>a</p>", inner_content=["<p>a</p>"])
        parent = Block(
            name="core/group",
            attributes={"layout": {"type": "constrained"}},
            inner_blocks=[child],
            inner_html="<div></div>",
            inner_content=["<div>", None, "</div>"]
        )

        self.assertEqual(len(parent.inner_blocks), 1)
        self.assertEqual(parent.inner_blocks[0].name, "core/paragraph")
        self.assertFalse(parent.is_raw)

    def test_raw_block(self):
        block = Block.raw("plain text")

        self.assertTrue(block.is_raw)
        self.assertIsNone(block.name)
        self.assertEqual(block.inner_content, ["plain text"])

    def test_document_defaults(self):
        document = Document(id=5)

        self.assertEqual(document.text, "")
        self.assertEqual(document.post_type, "post")
        self.assertEqual(document.post_status, "publish")

    def test_selection_defaults(self):
        selection = SelectionRange.from_args()

        self.assertEqual(selection.min_id, 0)
        self.assertIsNone(selection.max_id)
        self.assertIsNone(selection.num_items)
        self.assertEqual(selection.post_types, ["post"])
        self.assertFalse(selection.is_explicit)

    def test_selection_post_types_string(self):
        selection = SelectionRange.from_args(post_types=" post , page ,")
        self.assertEqual(selection.post_types, ["post", "page"])

    def test_selection_explicit_ids(self):
        selection = SelectionRange.from_args(post_ids=[3, 1])

        self.assertTrue(selection.is_explicit)
        self.assertEqual(selection.post_ids, [3, 1])

    def test_selection_validation(self):
        """Test that invalid ranges are rejected with SelectionError."""
        with self.assertRaises(SelectionError) as ctx:
            SelectionRange.from_args(min_id=10, max_id=5)
        self.assertIn("min_id", str(ctx.exception))

        with self.assertRaises(SelectionError):
            SelectionRange.from_args(min_id=-1)
        with self.assertRaises(SelectionError):
            SelectionRange.from_args(num_items=0)

    def test_run_report_summary(self):
        report = RunReport(direction=Direction.ENCODE, selected=3, processed=3, changed=2, unchanged=1)

        self.assertEqual(report.succeeded, 3)
        self.assertIn("encode: 3/3 documents processed", report.summary())
        self.assertIn("2 changed", report.summary())

        dry = RunReport(direction=Direction.DECODE, dry_run=True, changed=1)
        self.assertIn("1 would change", dry.summary())


class TestExceptions(unittest.TestCase):
    """Test the error types carry their context."""

    def test_malformed_token_error(self):
        error = MalformedTokenError("[BT:xx]", "bad payload")

        self.assertEqual(error.token, "[BT:xx]")
        self.assertEqual(error.reason, "bad payload")
        self.assertIn("bad payload", str(error))

    def test_persistence_error(self):
        error = PersistenceError(42, "no rows affected")

        self.assertEqual(error.document_id, 42)
        self.assertIn("42", str(error))
        self.assertIn("no rows affected", str(error))


class TestDatabaseManager(unittest.TestCase):
    """Test database management functionality."""

    def setUp(self):
        """Set up test database."""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = Path(self.temp_dir) / "test.db"

    def tearDown(self):
        """Clean up test database."""
        shutil.rmtree(self.temp_dir)

    def _populate(self, db):
        db.initialize_database()
        for post_id in (10, 20, 30, 40):
            db.add_document(Document(id=post_id, text=f"<!-- wp:separator /--> {post_id}"))
        db.add_document(Document(id=25, text="page", post_type="page"))
        db.add_document(Document(id=35, text="draft", post_status="draft"))

    def test_database_initialization(self):
        """Test database creation and table initialization."""
        with DatabaseManager(str(self.db_path)) as db:
            db.initialize_database()

            self.assertTrue(self.db_path.exists())
            self.assertIsNotNone(db.connection)
            self.assertEqual(db.count_documents(), 0)

        self.assertIsNone(db.connection)

    def test_requires_connection(self):
        db = DatabaseManager(str(self.db_path))
        with self.assertRaises(RuntimeError):
            db.initialize_database()

    def test_document_ids_newest_first(self):
        with DatabaseManager(str(self.db_path)) as db:
            self._populate(db)

            self.assertEqual(db.get_document_ids(["post"], "publish"), [40, 30, 20, 10])
            self.assertEqual(db.get_document_ids(["post"], "publish", min_id=20, max_id=30), [30, 20])
            self.assertEqual(db.get_document_ids(["post"], "publish", limit=2), [40, 30])
            self.assertEqual(db.get_document_ids(["post", "page"], "publish", min_id=20, max_id=30), [30, 25, 20])
            self.assertEqual(db.get_document_ids(["post"], "draft"), [35])
            self.assertEqual(db.get_document_ids([], "publish"), [])

    def test_document_operations(self):
        """Test reading and writing post content."""
        with DatabaseManager(str(self.db_path)) as db:
            self._populate(db)

            document = db.get_document(20)
            self.assertIsNotNone(document)
            self.assertEqual(document.text, "<!-- wp:separator /--> 20")
            self.assertIsNone(db.get_document(99))

            self.assertTrue(db.update_document(20, "new content"))
            self.assertEqual(db.get_document(20).text, "new content")
            self.assertFalse(db.update_document(99, "nothing"))

            self.assertEqual(db.count_documents(), 6)
            self.assertEqual([d.id for d in db.list_documents()], [10, 20, 25, 30, 35, 40])

    def test_add_document_replaces_existing(self):
        with DatabaseManager(str(self.db_path)) as db:
            db.initialize_database()
            db.add_document(Document(id=1, text="first"))
            db.add_document(Document(id=1, text="second"))

            self.assertEqual(db.count_documents(), 1)
            self.assertEqual(db.get_document(1).text, "second")

    def test_data_survives_reconnect(self):
        with DatabaseManager(str(self.db_path)) as db:
            self._populate(db)
            db.update_document(10, "saved")

        with DatabaseManager(str(self.db_path)) as db:
            self.assertEqual(db.get_document(10).text, "saved")

    def test_transform_run_against_database(self):
        """Test an encode/decode cycle through the DuckDB store."""
        with DatabaseManager(str(self.db_path)) as db:
            self._populate(db)
            transformer = BlockTransformer(db)

            report = transformer.run(Direction.ENCODE, SelectionRange.from_args(min_id=20))
            self.assertEqual(report.changed_ids, [40, 30, 20])
            self.assertTrue(db.get_document(30).text.startswith("[BT:"))
            self.assertEqual(db.get_document(10).text, "<!-- wp:separator /--> 10")

            transformer.run(Direction.DECODE, SelectionRange.from_args(min_id=20))
            self.assertEqual(db.get_document(30).text, "\n<!-- wp:separator /-->\n 30")


if __name__ == '__main__':
    unittest.main(verbosity=2)
