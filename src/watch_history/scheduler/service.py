"""
Scheduler service for parsing a whole history document in chunks.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from watch_history.extractor.fallback import extract_entries_by_pattern
from watch_history.extractor.service import EntryExtractor
from watch_history.normalizer.service import RecordNormalizer
from watch_history.scheduler.chunker import (
    calculate_optimal_chunk_size,
    create_chunk_spans,
)
from watch_history.shared.schemas.dto import ChunkProgress, ImportSummary, WatchRecord
from watch_history.shared.utils.configs import base_configs
from watch_history.shared.utils.errors import ExtractionError
from watch_history.shared.utils.logger import logger
from watch_history.shared.utils.types import ErrorType
from watch_history.summary.service import compute_timestamp_stats, generate_summary
from watch_history.timestamps.service import TimestampResolver
from watch_history.timestamps.stats import ExtractionStats, default_stats

# Decides, from a chunk's elapsed seconds, whether to hand control back to the loop
YieldPolicy = Callable[[float], bool]
ProgressCallback = Callable[[ChunkProgress], None]
CancelCheck = Callable[[], bool]


class FrameBudgetYieldPolicy:
    """Yield after any chunk that took longer than one frame."""

    def __init__(self, threshold_seconds: Optional[float] = None):
        self.threshold_seconds = (
            base_configs["frame_budget_seconds"]
            if threshold_seconds is None
            else threshold_seconds
        )

    def __call__(self, elapsed_seconds: float) -> bool:
        return elapsed_seconds > self.threshold_seconds


@dataclass
class ParsingOptions:
    """
    Options for one parse run.

    Attributes:
        chunk_size (int): Fixed chunk size; picked from tag density when None.
        on_progress (ProgressCallback): Receives a ChunkProgress after slow
            chunks and after the last chunk.
        should_cancel (CancelCheck): Polled before each chunk; True stops the
            run and returns what was parsed so far.
        min_timestamp_confidence (int): Confidence a timestamp needs.
        enable_international (bool): Also try localized date layouts.
        use_markup_parser (bool): False reads entries by text patterns only.
        debug_timestamps (bool): Collect the resolver's attempt trail.
        yield_policy (YieldPolicy): Defaults to FrameBudgetYieldPolicy.
        stats (ExtractionStats): Resolver counters, process-wide by default.
    """

    chunk_size: Optional[int] = None
    on_progress: Optional[ProgressCallback] = None
    should_cancel: Optional[CancelCheck] = None
    min_timestamp_confidence: int = field(
        default_factory=lambda: base_configs["min_timestamp_confidence"]
    )
    enable_international: bool = True
    use_markup_parser: bool = True
    debug_timestamps: bool = False
    yield_policy: Optional[YieldPolicy] = None
    stats: Optional[ExtractionStats] = None


class ParserService:
    """
    Parses a history document into watch records, chunk by chunk.

    Between chunks the service may yield to the event loop, report progress
    and honour cancellation. Faults inside a chunk are logged and the chunk
    is skipped; a document that yields no records at all gets one
    document-wide pattern pass before giving up.
    """

    def __init__(self, options: Optional[ParsingOptions] = None):
        """Initialize the service."""
        self.options = options or ParsingOptions()

    def build_extractor(self, options: ParsingOptions) -> EntryExtractor:
        resolver = TimestampResolver(
            min_confidence=options.min_timestamp_confidence,
            enable_international=options.enable_international,
            debug=options.debug_timestamps,
            stats=options.stats,
        )
        return EntryExtractor(
            resolver=resolver,
            normalizer=RecordNormalizer(),
            use_markup_parser=options.use_markup_parser,
        )

    def resolve_chunk_size(self, document: str, options: ParsingOptions) -> int:
        if options.chunk_size is None:
            return calculate_optimal_chunk_size(document)
        if options.chunk_size <= 0:
            logger.warning(
                f"Ignoring invalid chunk size {options.chunk_size}, "
                "using the density-based size"
            )
            return calculate_optimal_chunk_size(document)
        return options.chunk_size

    async def parse(
        self, document: str, options: Optional[ParsingOptions] = None
    ) -> List[WatchRecord]:
        """
        Parse a document.

        Args:
            document: The exported history page
            options: Options for this run, the service's options by default

        Returns:
            List of WatchRecord objects in document order; a partial list when
            the run was cancelled
        """
        if options is not None:
            self.options = options
        options = self.options

        if not document:
            return []

        extractor = self.build_extractor(options)
        yield_policy = options.yield_policy or FrameBudgetYieldPolicy()
        spans = create_chunk_spans(document, self.resolve_chunk_size(document, options))
        total_chunks = len(spans)
        logger.info(f"Parsing document of {len(document)} characters in {total_chunks} chunks")

        records: List[WatchRecord] = []
        cancelled = False
        started = time.perf_counter()

        for index, (start, end) in enumerate(spans):
            if options.should_cancel and options.should_cancel():
                logger.info(
                    f"Parsing cancelled after {index}/{total_chunks} chunks "
                    f"with {len(records)} records"
                )
                cancelled = True
                break

            chunk_started = time.perf_counter()
            try:
                records.extend(extractor.extract_records(document[start:end]))
            except Exception as e:
                logger.error(
                    f"Failed to process chunk {index + 1}/{total_chunks} "
                    f"({start}-{end}): {e}"
                )

            over_budget = yield_policy(time.perf_counter() - chunk_started)
            if options.on_progress and (over_budget or index == total_chunks - 1):
                self.report_progress(options.on_progress, len(records), index + 1, total_chunks, started)
            if over_budget:
                await asyncio.sleep(0)

        if not records and not cancelled and document.strip():
            records = self.parse_by_pattern(document, extractor)

        self.log_processing_results(records, options)
        return records

    def parse_by_pattern(self, document: str, extractor: EntryExtractor) -> List[WatchRecord]:
        logger.warning(
            "Structured extraction found no records, running pattern extraction "
            "over the whole document"
        )
        try:
            entries = extract_entries_by_pattern(document, extractor.resolver)
        except Exception as e:
            logger.error(f"Pattern extraction failed: {e}")
            return []
        records = []
        for entry in entries:
            record = extractor.normalizer.normalize(entry)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def report_progress(
        on_progress: ProgressCallback,
        processed: int,
        done: int,
        total_chunks: int,
        started: float,
    ) -> None:
        elapsed = time.perf_counter() - started
        progress = ChunkProgress(
            processed=processed,
            total=round(processed / done * total_chunks),
            percentage=done / total_chunks * 100,
            eta=elapsed / done * (total_chunks - done),
            current_chunk=done,
            total_chunks=total_chunks,
        )
        try:
            on_progress(progress)
        except Exception as e:
            logger.warning(f"Progress callback failed: {e}")

    @staticmethod
    def log_processing_results(records: List[WatchRecord], options: ParsingOptions) -> None:
        if not records:
            logger.info("Timestamp processing summary: no records")
            return
        stats = compute_timestamp_stats(records, options.min_timestamp_confidence)
        logger.info(
            f"Timestamp processing summary: {stats.records_with_timestamps}/"
            f"{stats.total_records} resolved ({stats.success_rate:.1f}%), "
            f"{stats.timestamp_extraction_failures} failures, "
            f"{stats.low_confidence_extractions} low confidence, "
            f"strategies {stats.strategy_usage}"
        )

    def generate_summary(self, records: List[WatchRecord]) -> ImportSummary:
        """
        Build the import summary for records parsed by this service.

        Args:
            records: Records returned by parse

        Returns:
            ImportSummary
        """
        return generate_summary(
            records,
            min_confidence=self.options.min_timestamp_confidence,
            extraction_stats=self.options.stats or default_stats,
        )

    def parse_sync(
        self,
        document: str,
        options: Optional[ParsingOptions] = None,
        timeout: Optional[float] = None,
    ) -> List[WatchRecord]:
        """
        Blocking wrapper around parse for callers without an event loop.

        Raises:
            ExtractionError: If the run does not finish within timeout seconds
        """

        async def run() -> List[WatchRecord]:
            if timeout is None:
                return await self.parse(document, options)
            return await asyncio.wait_for(self.parse(document, options), timeout)

        try:
            return asyncio.run(run())
        except asyncio.TimeoutError:
            raise ExtractionError(
                message=f"Parsing did not finish within {timeout} seconds",
                error_type=ErrorType.TIMEOUT_ERROR,
            )


async def parse(document: str, options: Optional[ParsingOptions] = None) -> List[WatchRecord]:
    return await ParserService(options).parse(document)


def parse_sync(
    document: str,
    options: Optional[ParsingOptions] = None,
    timeout: Optional[float] = None,
) -> List[WatchRecord]:
    return ParserService(options).parse_sync(document, timeout=timeout)
