"""
Chunk planning for large history documents.

Chunks are (start, end) spans over the document; nothing is copied until a
chunk is processed.
"""

import re
from typing import List, Optional, Tuple

from watch_history.shared.utils.configs import chunk_configs
from watch_history.shared.utils.errors import ExtractionError
from watch_history.shared.utils.types import ErrorType

TAG_RE = re.compile(r"<[^>]+>")
OUTER_CELL_START_RE = re.compile(r'<div[^>]*class="[^"]*\bouter-cell\b', re.IGNORECASE)
CONTENT_CELL_START_RE = re.compile(r'<div[^>]*class="[^"]*\bcontent-cell\b', re.IGNORECASE)

Span = Tuple[int, int]


def calculate_optimal_chunk_size(content: str) -> int:
    """
    Pick a chunk size from the tag density of the document.

    Dense markup gets smaller chunks so progress is reported more often;
    sparse markup gets larger ones.

    Args:
        content: The whole document

    Returns:
        Chunk size in characters
    """
    base = chunk_configs["base_chunk_size"]
    if not content:
        return base

    tag_count = sum(1 for _ in TAG_RE.finditer(content))
    density = tag_count / (len(content) / 1000)

    if density > chunk_configs["dense_threshold"]:
        return max(chunk_configs["min_chunk_size"], int(base * 0.5))
    if density < chunk_configs["sparse_threshold"]:
        return min(chunk_configs["max_chunk_size"], int(base * 1.5))
    return base


def _search_in(pattern: re.Pattern, content: str, start: int, end: int) -> Optional[int]:
    match = pattern.search(content, start, end)
    return match.start() if match else None


def _last_in(pattern: re.Pattern, content: str, start: int, end: int) -> Optional[int]:
    position = None
    for match in pattern.finditer(content, start, end):
        position = match.start()
    return position


def find_safe_boundary(content: str, cut: int, start: int = 0) -> int:
    """
    Move a raw cut point to a place where no entry is split.

    Entry containers are tried first, then content cells. For each, in
    order of preference:
    1. the first start within the forward window,
    2. the last start within the backward window and strictly after
       ``start``, so the entry enclosing the cut moves whole to the next
       chunk.
    Failing both, the cut moves just past the next ``>`` within the
    close-tag window, or stays where it is.

    Args:
        content: The whole document
        cut: Proposed end of the chunk
        start: Start of the chunk being cut

    Returns:
        The adjusted end of the chunk
    """
    length = len(content)
    if cut >= length:
        return length

    forward_end = min(length, cut + chunk_configs["boundary_window"])
    backward_start = max(start + 1, cut - chunk_configs["lookback_window"])
    for pattern in (OUTER_CELL_START_RE, CONTENT_CELL_START_RE):
        position = _search_in(pattern, content, cut, forward_end)
        if position is None and backward_start < cut:
            position = _last_in(pattern, content, backward_start, cut)
        if position is not None:
            return position

    close_tag = content.find(">", cut, min(length, cut + chunk_configs["close_tag_window"]))
    if close_tag != -1:
        return close_tag + 1

    return cut


def create_chunk_spans(content: str, chunk_size: int) -> List[Span]:
    """
    Split a document into contiguous, non-overlapping spans.

    Args:
        content: The whole document
        chunk_size: Target chunk size in characters

    Returns:
        Ordered list of (start, end) spans covering the document

    Raises:
        ExtractionError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ExtractionError(
            message=f"Chunk size must be positive, got {chunk_size}",
            error_type=ErrorType.VALUE_ERROR,
        )

    length = len(content)
    if length == 0:
        return []
    if length <= chunk_size:
        return [(0, length)]

    spans = []
    start = 0
    while start < length:
        end = find_safe_boundary(content, min(start + chunk_size, length), start)
        if end <= start:
            end = min(start + chunk_size, length)
        spans.append((start, end))
        start = end
    return spans
