#!/usr/bin/env python3
"""
blocktransformer - Block Obfuscation for Content Migrations

Main entry point. Encodes the blocks of stored posts as opaque tokens before a
content converter runs over them, decodes them again afterwards, and nudges
posts so the converter picks them up.
"""

import json
import logging
import sys
import argparse
from typing import List, Optional

from blocktransformer import __version__
from blocktransformer.config import ConfigManager
from blocktransformer.database import DatabaseManager
from blocktransformer.exceptions import SelectionError
from blocktransformer.importers import JsonPostsImporter
from blocktransformer.models import Direction, RunReport, SelectionRange
from blocktransformer.transform import BlockCodec, BlockTransformer


def setup_logging(config: ConfigManager):
    """Configure logging for the application."""
    level = getattr(logging, str(config.get("logging.level", "INFO")).upper(), logging.INFO)
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )


def build_selection(args: argparse.Namespace, config: ConfigManager) -> SelectionRange:
    """
    Build the selection range from command line arguments.

    Args:
        args: Parsed arguments of a transform command
        config: Configuration supplying default post types and status

    Returns:
        The selection range

    Raises:
        SelectionError: If the arguments do not form a valid selection
    """
    if args.post_id and (args.min_post_id is not None or args.max_post_id is not None):
        logging.warning("--post-id given; ignoring --min-post-id/--max-post-id")

    return SelectionRange.from_args(
        post_ids=args.post_id,
        min_id=args.min_post_id,
        max_id=args.max_post_id,
        num_items=args.num_items,
        post_types=args.post_types or config.post_types,
        post_status=config.post_status
    )


def run_transform(direction: Direction, args: argparse.Namespace, config: ConfigManager) -> RunReport:
    """
    Run one transform direction over the selected posts.

    Args:
        direction: Encode, decode or nudge
        args: Parsed command line arguments
        config: Loaded configuration

    Returns:
        The run report
    """
    selection = build_selection(args, config)
    codec = BlockCodec(prefix=config.token_prefix)

    with DatabaseManager(config.database_filename) as db:
        db.initialize_database()
        transformer = BlockTransformer(
            db,
            codec=codec,
            progress_interval=config.progress_interval,
            dry_run=args.dry_run
        )
        return transformer.run(direction, selection)


def run_import(path: str, config: ConfigManager) -> int:
    """
    Load posts from a JSON export into the database.

    Returns:
        Number of posts stored
    """
    importer = JsonPostsImporter(path)
    documents = importer.get_all_documents()

    with DatabaseManager(config.database_filename) as db:
        db.initialize_database()
        for document in documents:
            db.add_document(document)
        logging.info(f"Database now holds {db.count_documents()} posts")

    return len(documents)


def run_export(path: str, config: ConfigManager) -> int:
    """
    Write every stored post to a JSON file.

    Returns:
        Number of posts written
    """
    with DatabaseManager(config.database_filename) as db:
        db.initialize_database()
        documents = db.list_documents()

    posts = [
        {
            "ID": document.id,
            "post_type": document.post_type,
            "post_status": document.post_status,
            "post_content": document.text,
        }
        for document in documents
    ]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(posts, f, ensure_ascii=False, indent=2)

    logging.info(f"Exported {len(posts)} posts to {path}")
    return len(posts)


def print_report(report: RunReport, config: ConfigManager):
    """Print the end-of-run summary."""
    print("\n" + "=" * 60)
    print(f"{report.direction.value.upper()} {'DRY RUN ' if report.dry_run else ''}COMPLETED")
    print("=" * 60)
    print("\nResults:")
    print(f"- Selected:   {report.selected}")
    print(f"- Processed:  {report.processed}")
    print(f"- {'Would change' if report.dry_run else 'Changed'}: {report.changed}")
    print(f"- Unchanged:  {report.unchanged}")
    print(f"- Missing:    {report.missing}")
    print(f"- Errored:    {report.errored}")
    if report.unit_errors:
        print(f"- Tokens that failed to decode: {report.unit_errors}")
    print(f"\nSee {config.log_filename} for the per-document log")


def _add_selection_arguments(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--post-id",
        type=int,
        action="append",
        help="ID of a post to process (repeatable); overrides the ID range"
    )

    parser.add_argument(
        "--min-post-id",
        type=int,
        help="Lowest post ID to process (default: 0)"
    )

    parser.add_argument(
        "--max-post-id",
        type=int,
        help="Highest post ID to process (default: no limit)"
    )

    parser.add_argument(
        "--num-items",
        type=int,
        help="Maximum number of posts to process"
    )

    parser.add_argument(
        "--post-types",
        type=str,
        help='Comma-separated list of post types to process (default from config, normally "post")'
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing anything"
    )


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="blocktransformer - hide blocks from content converters and restore them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py import posts.json                              # Load posts into the database
  python main.py encode --min-post-id 100 --max-post-id 200     # Encode blocks in a range of posts
  python main.py nudge --min-post-id 100 --max-post-id 200      # Make the converter pick them up
  python main.py decode --post-id 150 --dry-run                 # Preview decoding one post
  python main.py export posts.json                              # Write posts back out
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to the configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"blocktransformer {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    encode_parser = subparsers.add_parser("encode", help='"Obfuscate" blocks in posts by encoding them as base64')
    _add_selection_arguments(encode_parser)

    decode_parser = subparsers.add_parser("decode", help='"Un-obfuscate" blocks in posts by decoding them')
    _add_selection_arguments(decode_parser)

    nudge_parser = subparsers.add_parser("nudge", help='"Nudge" posts so the content converter picks them up')
    _add_selection_arguments(nudge_parser)

    import_parser = subparsers.add_parser("import", help="Load posts from a JSON or JSON Lines export")
    import_parser.add_argument("file", help="Path to the export file")

    export_parser = subparsers.add_parser("export", help="Write stored posts to a JSON file")
    export_parser.add_argument("file", help="Path to the output file")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_arguments(argv)
    config = ConfigManager(args.config)
    setup_logging(config)

    logging.info(f"blocktransformer {__version__} - {args.command}")

    try:
        if args.command == "import":
            count = run_import(args.file, config)
            print(f"\nImported {count} posts into {config.database_filename}")
        elif args.command == "export":
            count = run_export(args.file, config)
            print(f"\nExported {count} posts to {args.file}")
        else:
            report = run_transform(Direction(args.command), args, config)
            print_report(report, config)

    except SelectionError as e:
        logging.error(str(e))
        print(f"\nNothing to do: {e}")
        sys.exit(1)

    except KeyboardInterrupt:
        logging.info("Run interrupted by user")
        print("\nRun interrupted. Already converted posts are safe; rerun to continue.")

    except Exception as e:
        logging.error(f"{args.command} failed: {e}")
        print(f"\n{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
