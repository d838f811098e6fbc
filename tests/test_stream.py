"""
Tests for streaming-read mode.
"""

import pytest

from watch_history.scheduler import ParsingOptions, parse, parse_stream
from watch_history.scheduler.stream import find_last_entry_start
from watch_history.shared.utils import configs
from watch_history.timestamps import ExtractionStats

OUTER_CELL = '<div class="outer-cell mdl-cell mdl-cell--12-col mdl-shadow--2dp">'


def pieces_of(text, size):
    return [text[i:i + size] for i in range(0, len(text), size)]


async def async_pieces(pieces):
    for piece in pieces:
        yield piece


async def collect(source, options=None):
    options = options or ParsingOptions(stats=ExtractionStats())
    return [record async for record in parse_stream(source, options)]


class TestFindLastEntryStart:
    """Test cases for locating the last complete entry boundary."""

    def test_last_outer_cell(self):
        buffer = f"head{OUTER_CELL}one</div>{OUTER_CELL}two"
        assert find_last_entry_start(buffer) == buffer.rindex("<div class=\"outer-cell")

    def test_outer_cell_at_start_only(self):
        """Test an entry is not cut between its cells while it is still arriving."""
        buffer = f'{OUTER_CELL}<div class="content-cell">partial'
        assert find_last_entry_start(buffer) == 0

    def test_content_cells_without_outer_cells(self):
        buffer = '<div class="content-cell">one</div><div class="content-cell">two'
        assert find_last_entry_start(buffer) == buffer.rindex("<div")

    def test_no_entries(self):
        assert find_last_entry_start("<html><body>") == 0


class TestParseStream:
    """Test cases for parsing a document that arrives in pieces."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 97, 1024, 1_000_000])
    async def test_matches_whole_document_parse(self, sample_document, size):
        expected = await parse(sample_document, ParsingOptions(stats=ExtractionStats()))
        streamed = await collect(pieces_of(sample_document, size))

        assert [record.content_dict() for record in streamed] == [
            record.content_dict() for record in expected
        ]

    @pytest.mark.asyncio
    async def test_async_source(self, sample_document):
        records = await collect(async_pieces(pieces_of(sample_document, 256)))
        assert [record.video_id for record in records] == [
            "video000001",
            "video000002",
            "music000001",
            "video000003",
        ]

    @pytest.mark.asyncio
    async def test_empty_source(self):
        assert await collect([]) == []

    @pytest.mark.asyncio
    async def test_cancellation(self, history_document, entry_html):
        document = history_document(
            [entry_html(video_id=f"video{i:06d}") for i in range(50)]
        )
        pieces = pieces_of(document, 500)
        seen = []

        def should_cancel():
            seen.append(True)
            return len(seen) > len(pieces) // 2

        records = await collect(
            pieces, ParsingOptions(stats=ExtractionStats(), should_cancel=should_cancel)
        )

        assert 0 < len(records) < 50
        assert [record.video_id for record in records] == [
            f"video{i:06d}" for i in range(len(records))
        ]

    @pytest.mark.asyncio
    async def test_buffer_cap(self, monkeypatch, history_document, entry_html, caplog):
        """Test an oversized buffer keeps only its newest part."""
        monkeypatch.setitem(configs.chunk_configs, "stream_buffer_limit", 2000)
        monkeypatch.setitem(configs.chunk_configs, "stream_buffer_keep", 1000)
        document = "x" * 5000 + history_document([entry_html()])

        records = await collect(pieces_of(document, 2500))

        assert "Stream buffer reached" in caplog.text
        assert len(records) == 1
