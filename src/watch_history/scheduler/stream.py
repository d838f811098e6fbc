"""
Streaming-read mode: parse a document that arrives in pieces.
"""

import asyncio
import time
from typing import AsyncIterable, AsyncIterator, Iterable, List, Optional, Union

from watch_history.extractor.service import EntryExtractor
from watch_history.scheduler.chunker import CONTENT_CELL_START_RE, OUTER_CELL_START_RE
from watch_history.scheduler.service import (
    FrameBudgetYieldPolicy,
    ParserService,
    ParsingOptions,
)
from watch_history.shared.schemas.dto import WatchRecord
from watch_history.shared.utils.configs import chunk_configs
from watch_history.shared.utils.logger import logger

TextSource = Union[Iterable[str], AsyncIterable[str]]


async def iterate_pieces(source: TextSource) -> AsyncIterator[str]:
    if hasattr(source, "__aiter__"):
        async for piece in source:
            yield piece
    else:
        for piece in source:
            yield piece


def find_last_entry_start(buffer: str) -> int:
    """
    Position of the last entry container start in the buffer, or 0.

    Everything before it holds complete entries only. Content cells are
    only used in documents without outer containers, so an entry is never
    cut between its cells.
    """
    for pattern in (OUTER_CELL_START_RE, CONTENT_CELL_START_RE):
        position = None
        for match in pattern.finditer(buffer):
            position = match.start()
        if position is not None:
            return position
    return 0


def extract_segment(extractor: EntryExtractor, segment: str) -> List[WatchRecord]:
    try:
        return extractor.extract_records(segment)
    except Exception as e:
        logger.error(f"Failed to process streamed segment of {len(segment)} characters: {e}")
        return []


async def parse_stream(
    source: TextSource, options: Optional[ParsingOptions] = None
) -> AsyncIterator[WatchRecord]:
    """
    Parse a document from an iterable or async iterable of text pieces.

    Complete entries are extracted as soon as they are buffered, so records
    are produced before the whole document has been read. The look-back
    buffer is capped: past the configured limit only the newest part is
    kept and a warning is logged.

    Args:
        source: Pieces of the document, in order
        options: Options for this run

    Yields:
        WatchRecord objects in document order
    """
    options = options or ParsingOptions()
    extractor = ParserService(options).build_extractor(options)
    yield_policy = options.yield_policy or FrameBudgetYieldPolicy()
    buffer_limit = chunk_configs["stream_buffer_limit"]
    buffer_keep = chunk_configs["stream_buffer_keep"]

    buffer = ""
    emitted = 0
    async for piece in iterate_pieces(source):
        if options.should_cancel and options.should_cancel():
            logger.info(f"Streaming parse cancelled after {emitted} records")
            return

        buffer += piece
        cut = find_last_entry_start(buffer)
        if cut:
            segment, buffer = buffer[:cut], buffer[cut:]
            started = time.perf_counter()
            for record in extract_segment(extractor, segment):
                emitted += 1
                yield record
            if yield_policy(time.perf_counter() - started):
                await asyncio.sleep(0)

        if len(buffer) > buffer_limit:
            logger.warning(
                f"Stream buffer reached {len(buffer)} characters without a complete "
                f"entry, keeping the newest {buffer_keep}"
            )
            buffer = buffer[-buffer_keep:]

    if options.should_cancel and options.should_cancel():
        logger.info(f"Streaming parse cancelled after {emitted} records")
        return

    for record in extract_segment(extractor, buffer):
        emitted += 1
        yield record
    logger.info(f"Streaming parse produced {emitted} records")
