"""
Chunking, scheduling and streaming of whole documents.
"""

from .chunker import (
    calculate_optimal_chunk_size,
    create_chunk_spans,
    find_safe_boundary,
)
from .service import (
    FrameBudgetYieldPolicy,
    ParserService,
    ParsingOptions,
    parse,
    parse_sync,
)
from .stream import parse_stream
