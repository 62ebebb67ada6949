"""
Transform driver for blocktransformer.

Selects documents from a store, applies one direction of the block transform
to each, and writes back only the documents whose text actually changed.
Documents are handled one at a time; a failure on one document is logged and
the batch moves on, so an interrupted run can simply be started again.
"""

import logging
from typing import List, Optional

from ..exceptions import MalformedTokenError, PersistenceError, SelectionError
from ..grammar import BlockParser, render_blocks
from ..models import Block, Direction, Document, RunReport, SelectionRange, TransformResult
from ..database import DocumentStore
from .codec import BlockCodec
from .scanner import find_decodable_tokens, find_encodable_blocks


PROGRESS_INTERVAL = 25
NUDGE_MARKER = "<!--"


class BlockTransformer:
    """
    Encodes, decodes and nudges post content in a document store.
    """

    def __init__(
        self,
        store: DocumentStore,
        codec: Optional[BlockCodec] = None,
        parser: Optional[BlockParser] = None,
        progress_interval: int = PROGRESS_INTERVAL,
        dry_run: bool = False
    ):
        """
        Initialize the transformer.

        Args:
            store: Where documents are read from and written to
            codec: Token codec; defaults to one writing the ``[BT:`` prefix
            parser: Block grammar parser
            progress_interval: Log a progress line every this many documents
            dry_run: Compute and log changes without writing them
        """
        if progress_interval < 1:
            raise ValueError("progress_interval must be at least 1")
        self.store = store
        self.codec = codec or BlockCodec()
        self.parser = parser or BlockParser()
        self.progress_interval = progress_interval
        self.dry_run = dry_run

    def select_documents(self, selection: SelectionRange) -> List[int]:
        """
        Resolve a selection to the document IDs to process.

        Explicit IDs are returned as given; existence is checked when each
        document is fetched. Otherwise the store is queried, newest first.

        Args:
            selection: The selection range

        Returns:
            Document IDs in processing order

        Raises:
            SelectionError: If nothing matches the selection
        """
        if selection.is_explicit:
            ids = list(selection.post_ids)
        else:
            ids = self.store.get_document_ids(
                selection.post_types,
                selection.post_status,
                min_id=selection.min_id,
                max_id=selection.max_id,
                limit=selection.num_items
            )

        if not ids:
            raise SelectionError(
                f"No {selection.post_status} documents of type {', '.join(selection.post_types)} "
                f"match the selection"
            )
        return ids

    def encode_content(self, text: str) -> TransformResult:
        """
        Replace every named top-level block in ``text`` with its token.

        Args:
            text: Document text

        Returns:
            The transform result; unchanged when there is nothing to encode
        """
        blocks = self.parser.parse(text)
        candidates = find_encodable_blocks(blocks)
        if not candidates:
            return TransformResult(text=text, changed=False)

        for index, block in candidates:
            blocks[index] = Block.raw(self.codec.encode(block))

        new_text = render_blocks(blocks)
        return TransformResult(text=new_text, changed=new_text != text, units=len(candidates))

    def decode_content(self, text: str, document_id: Optional[int] = None) -> TransformResult:
        """
        Replace the tokens in ``text`` with the block text they carry.

        Only tokens standing between top-level blocks, or alone in a top-level
        paragraph, are decoded; a token inside any other block is content.
        Decoded text is spliced into the original, so nothing else in the
        document changes and decoded text is never scanned again.
        Tokens that fail to decode are left in place and reported in the
        result's ``errors``.

        Args:
            text: Document text
            document_id: Document the text belongs to, for log lines

        Returns:
            The transform result
        """
        if not self.codec.contains_token(text):
            return TransformResult(text=text, changed=False)

        units = 0
        errors: List[str] = []
        location = f" in document {document_id}" if document_id is not None else ""

        pieces = []
        last_end = 0
        for match in find_decodable_tokens(text, self.parser.parse_with_offsets(text)):
            try:
                decoded = self.codec.decode(match.text)
            except MalformedTokenError as e:
                logging.error(f"Could not decode token at offset {match.start}{location}: {e.reason}")
                errors.append(str(e))
                continue
            pieces.append(text[last_end:match.start])
            pieces.append(decoded)
            last_end = match.end
            units += 1
        pieces.append(text[last_end:])

        new_text = "".join(pieces)
        return TransformResult(text=new_text, changed=new_text != text, units=units, errors=errors)

    def nudge_content(self, text: str) -> TransformResult:
        """
        Prepend a newline to ``text`` if it starts with a block comment.

        This makes downstream converters see the document as changed.
        """
        if not text.startswith(NUDGE_MARKER):
            return TransformResult(text=text, changed=False)
        return TransformResult(text="\n" + text, changed=True, units=1)

    def transform_document(self, document: Document, direction: Direction) -> TransformResult:
        """
        Apply ``direction`` to one document's text.

        The document itself is not modified; persisting the result when
        ``changed`` is true is up to the caller.
        """
        if direction == Direction.ENCODE:
            return self.encode_content(document.text)
        if direction == Direction.DECODE:
            return self.decode_content(document.text, document.id)
        if direction == Direction.NUDGE:
            return self.nudge_content(document.text)
        raise ValueError(f"Unknown direction: {direction}")

    def run(self, direction: Direction, selection: SelectionRange) -> RunReport:
        """
        Apply ``direction`` to every selected document.

        Args:
            direction: Encode, decode or nudge
            selection: Which documents to process

        Returns:
            Counters for the run

        Raises:
            SelectionError: If nothing matches the selection
        """
        document_ids = self.select_documents(selection)
        total = len(document_ids)
        report = RunReport(direction=direction, dry_run=self.dry_run, selected=total)
        seen = set()

        logging.info(f"Processing {total} documents ({direction.value}{', dry run' if self.dry_run else ''})")

        for position, document_id in enumerate(document_ids, 1):
            if document_id in seen:
                logging.info(f"Document {document_id} already handled in this run, skipping")
            else:
                seen.add(document_id)
                logging.info(f"Processing document {position}/{total}: {document_id}")
                try:
                    self._process_document(document_id, direction, report)
                except PersistenceError as e:
                    logging.error(str(e))
                    report.errored += 1
                except Exception as e:
                    logging.error(f"Error processing document {document_id}: {e}")
                    report.errored += 1

            if position % self.progress_interval == 0 and position < total:
                logging.info(
                    f"Progress: {report.succeeded} documents succeeded, "
                    f"{report.errored} errored, {total - position} remaining"
                )

        logging.info(report.summary())
        return report

    def _process_document(self, document_id: int, direction: Direction, report: RunReport) -> None:
        document = self.store.get_document(document_id)
        if document is None:
            logging.warning(f"Document {document_id} not found, skipping")
            report.missing += 1
            return

        report.processed += 1
        result = self.transform_document(document, direction)
        report.unit_errors += len(result.errors)

        if not result.changed:
            logging.info(f"No changes needed for document {document_id}")
            report.unchanged += 1
            return

        if self.dry_run:
            logging.info(f"Dry run: would {direction.value} {result.units} unit(s) in document {document_id}")
        else:
            if not self.store.update_document(document_id, result.text):
                raise PersistenceError(document_id, "no rows affected")
            logging.info(f"{direction.value.capitalize()}d {result.units} unit(s) in document {document_id}")

        report.changed += 1
        report.changed_ids.append(document_id)
