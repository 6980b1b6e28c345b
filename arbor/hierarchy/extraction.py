"""
Extraction engine.

Reads a header and data rows from a single text stream and turns every row
into an extracted record, either in read order on the calling thread or
fanned out to a bounded pool of worker threads.

The stream is read exactly once. An extractor is therefore single-use:
after ``extract_sequential`` or ``extract_concurrent`` has run, the
extractor is exhausted and any further extraction is a caller error that
raises ``StreamConsumedError``. To retry, open the input again and create a
new extractor.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import TextIO

from arbor.hierarchy.columns import ColumnSchema, resolve_columns
from arbor.hierarchy.errors import RecordError, StreamConsumedError, StreamError
from arbor.hierarchy.records import ExtractedRecord, extract_record

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4
DEFAULT_MAX_PENDING = 1024


class ExtractionStrategy(str, Enum):
    """How data rows are turned into records."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


class _FirstFailure:
    """Single-slot holder that keeps the first reported error and drops the rest."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._error: Exception | None = None

    def offer(self, error: Exception) -> bool:
        """Store *error* if the slot is empty. Returns True if it was stored."""
        with self._lock:
            if self._error is not None:
                return False
            self._error = error
            return True

    @property
    def error(self) -> Exception | None:
        return self._error


class HierarchyExtractor:
    """
    Single-use extractor over one text stream.

    The header is read and resolved on construction, so a bad header fails
    before any data row is touched.

    Usage:
        with open("items.csv", encoding="utf-8") as fh:
            extractor = HierarchyExtractor(fh)
            records = extractor.extract_concurrent()
    """

    def __init__(
        self,
        stream: TextIO,
        max_workers: int = DEFAULT_MAX_WORKERS,
        max_pending: int = DEFAULT_MAX_PENDING,
    ):
        """
        Read the header and resolve the column schema.

        Args:
            stream: Text stream positioned at the header line.
            max_workers: Worker threads for concurrent extraction.
            max_pending: Lines that may be read ahead of the workers.

        Raises:
            SchemaError: If the header is missing or invalid.
            StreamError: If reading the header fails.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_pending < 1:
            raise ValueError("max_pending must be at least 1")

        self._stream = stream
        self._max_workers = max_workers
        self._max_pending = max_pending
        self._exhausted = False
        self._line_number = 1
        self._columns = resolve_columns(self._read_line())
        logger.debug("Resolved columns: %s", dict(self._columns))

    @property
    def columns(self) -> ColumnSchema:
        return self._columns

    @property
    def exhausted(self) -> bool:
        """True once an extraction has consumed the stream."""
        return self._exhausted

    def extract(
        self, strategy: ExtractionStrategy | str = ExtractionStrategy.SEQUENTIAL
    ) -> list[ExtractedRecord]:
        """Run the extraction strategy named by *strategy*."""
        strategy = ExtractionStrategy(strategy)
        if strategy is ExtractionStrategy.CONCURRENT:
            return self.extract_concurrent()
        return self.extract_sequential()

    def extract_sequential(self) -> list[ExtractedRecord]:
        """
        Extract every remaining row on the calling thread.

        Returns:
            Records in read order.

        Raises:
            RecordError: On the first invalid row; nothing after it is read.
            StreamError: If reading fails.
            StreamConsumedError: If this extractor was already used.
        """
        records: list[ExtractedRecord] = []
        for number, line in self._lines():
            try:
                records.append(extract_record(self._columns, line))
            except RecordError as exc:
                exc.line_number = number
                logger.warning("Sequential extraction failed: %s", exc)
                raise

        logger.debug("Sequential extraction produced %d records", len(records))
        return records

    def extract_concurrent(self) -> list[ExtractedRecord]:
        """
        Extract every remaining row on a bounded worker pool.

        Lines are read serially; each captured line is handed to a worker.
        At most ``max_pending`` lines are in flight, so memory stays bounded
        for long streams. All submitted work finishes before this returns
        or raises.

        Returns:
            The same records as ``extract_sequential`` in no particular order.

        Raises:
            RecordError: For some invalid row. When several rows are invalid,
                which one is reported is unspecified.
            StreamError: If reading fails.
            StreamConsumedError: If this extractor was already used.
        """
        records: list[ExtractedRecord] = []
        records_lock = threading.Lock()
        failure = _FirstFailure()
        slots = threading.BoundedSemaphore(self._max_pending)

        def work(number: int, line: str) -> None:
            try:
                record = extract_record(self._columns, line)
            except RecordError as exc:
                exc.line_number = number
                failure.offer(exc)
            except Exception as exc:
                failure.offer(exc)
            else:
                with records_lock:
                    records.append(record)
            finally:
                slots.release()

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="arbor-extract",
        ) as pool:
            for number, line in self._lines():
                if failure.error is not None:
                    break
                slots.acquire()
                pool.submit(work, number, line)

        if failure.error is not None:
            logger.warning("Concurrent extraction failed: %s", failure.error)
            raise failure.error

        logger.debug("Concurrent extraction produced %d records", len(records))
        return records

    # ------------------------------------------------------------------

    def _read_line(self) -> str:
        try:
            return self._stream.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise StreamError(
                f"Failed to read input after line {self._line_number - 1}",
                details=str(exc),
            ) from exc

    def _lines(self) -> Iterator[tuple[int, str]]:
        """Yield (line number, line) pairs until end of stream."""
        if self._exhausted:
            raise StreamConsumedError("Input stream has already been extracted")
        self._exhausted = True

        while True:
            self._line_number += 1
            line = self._read_line()
            if not line:
                return
            yield self._line_number, line
