"""
Tests for the entry extractor and the pattern-only fallback.
"""

from datetime import datetime

import pytest
import pytz

from watch_history.extractor import EntryExtractor, extract_entries_by_pattern
from watch_history.shared.schemas import Product
from watch_history.timestamps import ExtractionStats, TimestampResolver

OUTER_CELL = '<div class="outer-cell mdl-cell mdl-cell--12-col mdl-shadow--2dp">'
CONTENT_CELL = '<div class="content-cell mdl-cell mdl-cell--6-col mdl-typography--body-1">'


@pytest.fixture
def resolver():
    return TimestampResolver(stats=ExtractionStats())


@pytest.fixture
def extractor(resolver):
    return EntryExtractor(resolver=resolver)


class TestStructuredExtraction:
    """Test cases for extraction with the markup parser."""

    def test_extract_records_from_export(self, extractor, sample_document):
        """Test every entry of the sample export except the ad is extracted."""
        records = extractor.extract_records(sample_document)

        assert [record.video_id for record in records] == [
            "video000001",
            "video000002",
            "music000001",
            "video000003",
        ]

        first = records[0]
        assert first.video_title == "First Video"
        assert first.video_url == "https://www.youtube.com/watch?v=video000001"
        assert first.channel_title == "Test Channel"
        assert first.channel_id == "UC38IQsAvIsxxjztdMZQtwHA"
        assert first.watched_at == datetime(2025, 8, 12, 3, 30, tzinfo=pytz.utc)
        assert first.product == Product.YOUTUBE

    def test_channel_handle(self, extractor, sample_document):
        second = extractor.extract_records(sample_document)[1]

        assert second.channel_id == "@otherchannel"
        assert second.channel_title == "Other Channel"
        assert second.watched_at == datetime(2025, 8, 10, 14, 15, 42, tzinfo=pytz.utc)

    def test_music_entry(self, extractor, sample_document):
        music = extractor.extract_records(sample_document)[2]

        assert music.product == Product.YOUTUBE_MUSIC
        assert music.watched_at == datetime(2025, 1, 4, 5, 5, 10, tzinfo=pytz.utc)

    def test_entry_without_timestamp_is_kept(self, extractor, sample_document):
        """Test an entry with a video but no timestamp keeps a null instant."""
        third = extractor.extract_records(sample_document)[3]

        assert third.video_title == "Third Video"
        assert third.watched_at is None
        assert third.raw_timestamp is None
        assert third.year is None

    def test_ads_are_skipped(self, extractor, history_document, entry_html, ad_entry_html):
        document = history_document([ad_entry_html(), entry_html()])
        entries = extractor.extract_entries(document)

        assert len(entries) == 1
        assert all(not entry.is_ad for entry in entries)

    def test_product_from_caption(self, extractor, history_document, entry_html):
        document = history_document([entry_html(product="YouTube Music")])
        assert extractor.extract_records(document)[0].product == Product.YOUTUBE_MUSIC

    def test_product_from_listened_to(self, extractor, history_document, entry_html):
        document = history_document([entry_html(action="Listened to")])
        assert extractor.extract_records(document)[0].product == Product.YOUTUBE_MUSIC

    def test_shorts_link(self, extractor, history_document):
        document = history_document(
            [
                f'{OUTER_CELL}{CONTENT_CELL}Watched <a href="https://www.youtube.com/shorts/sh0rtId">'
                "A Short</a><br>Aug 11, 2025, 10:30:00 PM CDT<br></div></div>"
            ]
        )
        records = extractor.extract_records(document)

        assert len(records) == 1
        assert records[0].video_id == "sh0rtId"

    def test_bare_url_title_is_recovered(self, extractor, history_document):
        """Test the title following a link whose text is its own URL."""
        url = "https://www.youtube.com/watch?v=bareUrl0001"
        document = history_document(
            [
                f'{OUTER_CELL}{CONTENT_CELL}Watched <a href="{url}">{url}</a>'
                " Recovered Title<br>Aug 11, 2025, 10:30:00 PM CDT<br></div></div>"
            ]
        )
        records = extractor.extract_records(document)
        assert records[0].video_title == "Recovered Title"

    def test_removed_video_with_timestamp_is_kept(self, extractor, history_document):
        """Test an entry without a link but with a timestamp becomes a record."""
        document = history_document(
            [
                f"{OUTER_CELL}{CONTENT_CELL}Watched a video that has been removed<br>"
                "Aug 11, 2025, 10:30:00 PM CDT<br></div></div>"
            ]
        )
        records = extractor.extract_records(document)

        assert len(records) == 1
        assert records[0].video_url is None
        assert records[0].watched_at == datetime(2025, 8, 12, 3, 30, tzinfo=pytz.utc)

    def test_entry_without_link_or_digits_is_dropped(self, extractor, history_document):
        document = history_document(
            [f"{OUTER_CELL}{CONTENT_CELL}Watched a video that has been removed<br></div></div>"]
        )
        assert extractor.extract_records(document) == []

    def test_outer_cell_strategy(self, extractor):
        """Test entries are found by their outer container without content cells."""
        chunk = (
            f'{OUTER_CELL}Watched <a href="https://www.youtube.com/watch?v=outer00001">'
            "Outer Video</a><br>Aug 11, 2025, 10:30:00 PM CDT<br></div>"
        )
        records = extractor.extract_records(chunk)

        assert len(records) == 1
        assert records[0].video_title == "Outer Video"

    def test_link_container_strategy(self, extractor):
        """Test entries are found by the div around a watch link."""
        chunk = (
            '<div><p>Watched <a href="https://www.youtube.com/watch?v=plain00001">Plain Video</a>'
            " Aug 11, 2025, 10:30:00 PM CDT</p></div>"
            '<div><p>Watched <a href="https://www.youtube.com/watch?v=plain00002">Next Video</a>'
            " Aug 12, 2025, 10:30:00 PM CDT</p></div>"
        )
        records = extractor.extract_records(chunk)
        assert [record.video_id for record in records] == ["plain00001", "plain00002"]

    def test_empty_chunk(self, extractor):
        assert extractor.extract_records("") == []


class TestPatternExtraction:
    """Test cases for extraction by text patterns."""

    def test_pattern_path_matches_structured_path(self, resolver, sample_document):
        """Test the pattern path reads the sample export like the parser does."""
        structured = EntryExtractor(resolver=resolver).extract_records(sample_document)
        patterned = EntryExtractor(
            resolver=resolver, use_markup_parser=False
        ).extract_records(sample_document)

        assert [record.content_dict() for record in patterned] == [
            record.content_dict() for record in structured
        ]

    def test_duplicate_urls_are_read_once(self, resolver):
        markup = (
            '<p><a href="https://www.youtube.com/watch?v=dup0000001">Twice</a>'
            " Aug 11, 2025, 10:30:00 PM CDT</p>"
            '<p><a href="https://www.youtube.com/watch?v=dup0000001">Twice</a></p>'
        )
        entries = extract_entries_by_pattern(markup, resolver)
        assert len(entries) == 1

    def test_timestamp_is_not_borrowed_from_previous_entry(self, resolver):
        """Test an entry without a timestamp does not take its neighbour's."""
        markup = (
            '<p><a href="https://www.youtube.com/watch?v=one0000001">One</a><br>'
            "Aug 11, 2025, 10:30:00 PM CDT</p>"
            '<p><a href="https://www.youtube.com/watch?v=two0000002">Two</a><br>'
            "no time here</p>"
        )
        first, second = extract_entries_by_pattern(markup, resolver)

        assert first.raw_timestamp == "Aug 11, 2025, 10:30:00 PM CDT"
        assert second.raw_timestamp is None

    def test_ads_are_skipped(self, resolver, history_document, entry_html, ad_entry_html):
        document = history_document([ad_entry_html(), entry_html()])
        entries = extract_entries_by_pattern(document, resolver)

        assert len(entries) == 1
        assert entries[0].video.video_id == "dQw4w9WgXcQ"

    def test_no_links(self, resolver):
        assert extract_entries_by_pattern("<html><body>nothing</body></html>", resolver) == []
