"""
Tests for the timestamp resolution engine.

This module covers the pattern and parse cascades, timezone handling,
confidence scoring, the acceptance gate and the extraction statistics.
"""

from datetime import datetime

import pytest
import pytz

from watch_history.timestamps import (
    ExtractionStats,
    TimestampResolver,
    extract_timestamp,
    get_extraction_stats,
    reset_extraction_stats,
)
from watch_history.timestamps.parsers import (
    normalize_international,
    parse_generic,
    parse_primary,
    to_24_hour,
)

EXPECTED_INSTANT = datetime(2025, 8, 12, 3, 30, tzinfo=pytz.utc)


@pytest.fixture
def stats():
    return ExtractionStats()


@pytest.fixture
def resolver(stats):
    return TimestampResolver(stats=stats)


class TestResolve:
    """Test cases for resolving raw timestamp text."""

    def test_export_format_with_timezone(self, resolver):
        """Test the export's own format with a timezone abbreviation."""
        result = resolver.resolve("Aug 11, 2025, 10:30:00 PM CDT")

        assert result.success
        assert result.timestamp == EXPECTED_INSTANT
        assert result.timestamp.tzinfo is not None
        assert result.confidence >= 80
        assert result.quality.has_timezone
        assert result.quality.has_full_time
        assert result.quality.date_reasonable
        assert result.raw_timestamp == "Aug 11, 2025, 10:30:00 PM CDT"
        assert result.strategy == "pattern-manual-primary"

    def test_space_variants_and_lowercase_meridiem(self, resolver):
        """Test narrow no-break spaces and "p.m." are normalized first."""
        result = resolver.resolve("Aug\u00a011, 2025, 10:30:00\u202fp.m. CDT")
        assert result.timestamp == EXPECTED_INSTANT

    def test_default_timezone_applies_without_abbreviation(self, resolver):
        """Test a timestamp without an abbreviation is read in the default zone."""
        result = resolver.resolve("Aug 11, 2025, 10:30:00 PM")

        assert result.timestamp == EXPECTED_INSTANT
        assert not result.quality.has_timezone

    def test_explicit_default_timezone(self, stats):
        """Test an injected default timezone."""
        resolver = TimestampResolver(default_timezone=pytz.utc, stats=stats)
        result = resolver.resolve("Aug 11, 2025, 10:30:00 PM")
        assert result.timestamp == datetime(2025, 8, 11, 22, 30, tzinfo=pytz.utc)

    def test_random_text_fails(self, resolver):
        """Test text without any date is a resolution failure."""
        result = resolver.resolve("Some random text with no date")

        assert not result.success
        assert result.timestamp is None
        assert result.raw_timestamp is None
        assert result.confidence == 0
        assert result.metrics.fallback_used
        assert result.metrics.attempts_count == 2

    def test_iso_format(self, resolver):
        """Test ISO dates go through the format table."""
        result = resolver.resolve("2025-08-11 22:30:00")

        assert result.timestamp == EXPECTED_INSTANT
        assert result.strategy == "pattern-format-table"

    def test_us_numeric_format(self, resolver):
        """Test M/D/YYYY with an eastern timezone."""
        result = resolver.resolve("8/11/2025, 10:30:00 PM EST")

        assert result.timestamp == datetime(2025, 8, 12, 3, 30, tzinfo=pytz.utc)
        assert result.strategy == "pattern-manual-numeric"

    def test_watched_at_format(self, resolver):
        """Test the "Watched at ... on <date>" layout."""
        result = resolver.resolve("Watched at 10:30 PM on Aug 11, 2025")

        assert result.timestamp == EXPECTED_INSTANT
        assert result.strategy == "pattern-manual-watched-at"

    def test_timestamp_found_in_markup(self, resolver):
        """Test the markup is searched and line breaks become spaces."""
        result = resolver.resolve(
            "", "<div>Watched<br>Aug 11, 2025, 10:30:00 PM CDT<br></div>"
        )
        assert result.timestamp == EXPECTED_INSTANT

    def test_implausible_year_is_rejected_but_reported(self, resolver):
        """Test the raw text, confidence and quality survive a rejection."""
        result = resolver.resolve("Aug 11, 1999, 10:30:00 PM CDT")

        assert result.timestamp is None
        assert result.raw_timestamp == "Aug 11, 1999, 10:30:00 PM CDT"
        assert result.confidence > 0
        assert not result.quality.date_reasonable

    def test_plausible_range_follows_clock(self, stats):
        """Test the latest plausible year comes from the injected clock."""
        resolver = TimestampResolver(
            stats=stats, clock=lambda: datetime(2010, 1, 1, tzinfo=pytz.utc)
        )
        result = resolver.resolve("Aug 11, 2025, 10:30:00 PM CDT")
        assert result.timestamp is None

    def test_localized_format_below_default_threshold(self, resolver):
        """Test a French timestamp scores under the default threshold."""
        result = resolver.resolve("11 août 2025 à 22h30")

        assert result.timestamp is None
        assert result.raw_timestamp == "11 août 2025 à 22h30"
        assert 0 < result.confidence < 70

    def test_localized_format_with_lower_threshold(self, stats):
        """Test a French timestamp is accepted when the threshold allows it."""
        resolver = TimestampResolver(min_confidence=40, stats=stats)
        result = resolver.resolve("11 août 2025 à 22h30")

        assert result.timestamp == EXPECTED_INSTANT
        assert result.strategy == "pattern-format-table"

    def test_cjk_format(self, stats):
        """Test year/month/day markers."""
        resolver = TimestampResolver(min_confidence=60, stats=stats)
        result = resolver.resolve("2025年8月11日 22:30")

        assert result.timestamp == EXPECTED_INSTANT
        assert result.strategy == "pattern-manual-cjk"

    def test_international_patterns_can_be_disabled(self, stats):
        """Test localized layouts are ignored when disabled."""
        resolver = TimestampResolver(
            min_confidence=40, enable_international=False, stats=stats
        )
        result = resolver.resolve("11 août 2025 à 22h30")
        assert result.timestamp is None

    def test_debug_trail(self, stats):
        """Test the attempt trail is only collected in debug mode."""
        resolver = TimestampResolver(debug=True, stats=stats)

        success = resolver.resolve("Aug 11, 2025, 10:30:00 PM CDT")
        assert [attempt.result for attempt in success.debug_attempts] == ["success"]
        assert success.debug_attempts[0].strategy == "pattern"

        failure = resolver.resolve("Some random text with no date")
        assert [attempt.result for attempt in failure.debug_attempts] == [
            "failed",
            "failed",
        ]
        assert failure.debug_attempts[0].error == "No timestamp pattern found"

        assert TimestampResolver(stats=stats).resolve("x").debug_attempts is None


    def test_unrecognized_timezone_is_rejected(self, stats):
        """Test a zone missing from the offset table is not read as the default zone."""
        resolver = TimestampResolver(debug=True, stats=stats)
        result = resolver.resolve("Aug 11, 2025, 10:30:00 PM IST")

        assert result.timestamp is None
        assert result.raw_timestamp == "Aug 11, 2025, 10:30:00 PM IST"
        assert result.confidence < 70
        assert not result.quality.has_timezone
        assert "Unrecognized timezone IST" in result.debug_attempts[0].error

    @pytest.mark.parametrize("zone", ["AEST", "BRT", "MSK"])
    def test_other_unrecognized_timezones(self, resolver, zone):
        assert resolver.resolve(f"Aug 11, 2025, 10:30:00 PM {zone}").timestamp is None

    def test_find_unknown_timezone(self):
        assert TimestampResolver.find_unknown_timezone("Aug 11, 2025, 10:30:00 PM IST") == "IST"
        assert TimestampResolver.find_unknown_timezone("8/11/2025, 10:30:00 PM BRT") == "BRT"
        assert TimestampResolver.find_unknown_timezone("Aug 11, 2025, 10:30:00 PM CDT") is None
        assert TimestampResolver.find_unknown_timezone("Aug 11, 2025, 10:30:00 PM") is None
        assert TimestampResolver.find_unknown_timezone("2025-08-11 22:30:00") is None


class TestConfidence:
    """Test cases for confidence scoring."""

    @pytest.mark.parametrize(
        "bare, marked",
        [
            ("Aug 11, 2025, 10:30:00", "Aug 11, 2025, 10:30:00 PM CDT"),
            ("2025-08-11 10:30:00", "2025-08-11 10:30:00 PM UTC"),
            ("11.08.2025, 10:30:00", "11.08.2025, 10:30:00 PM CET"),
            ("8/11/2025 10:30", "8/11/2025 10:30 AM EST"),
        ],
    )
    def test_timezone_and_meridiem_never_lower_the_score(self, bare, marked):
        """Test adding a timezone and AM/PM marker never lowers confidence."""
        for strategy in ("manual-primary", "manual-numeric", "format-table", "generic"):
            for is_fallback in (False, True):
                assert TimestampResolver.score(
                    marked, strategy, is_fallback
                ) >= TimestampResolver.score(bare, strategy, is_fallback)

    def test_score_is_clamped(self):
        """Test the score stays within 0-100."""
        assert TimestampResolver.score("Aug 11, 2025, 10:30:00 PM CDT", "manual-primary", False) == 100
        assert TimestampResolver.score("1:00", "generic", True) == 0

    def test_unrecognized_timezone_is_penalized(self):
        raw = "Aug 11, 2025, 10:30:00 PM IST"
        assert TimestampResolver.score(raw, "manual-primary", False) == 100
        assert TimestampResolver.score(raw, "manual-primary", False, "IST") < 70

    def test_fallback_is_penalized(self):
        """Test fallback matches score lower than primary matches."""
        raw = "2025-08-11 22:30"
        assert TimestampResolver.score(raw, "generic", True) < TimestampResolver.score(
            raw, "generic", False
        )


class TestParsers:
    """Test cases for the individual parse strategies."""

    def test_to_24_hour(self):
        assert to_24_hour(12, "AM") == 0
        assert to_24_hour(12, "PM") == 12
        assert to_24_hour(1, "PM") == 13
        assert to_24_hour(9, "AM") == 9

    def test_parse_primary(self):
        assert parse_primary("Sep 1, 2024, 12:05:09 AM") == datetime(2024, 9, 1, 0, 5, 9)
        assert parse_primary("2024-09-01") is None

    def test_normalize_international(self):
        assert normalize_international("11 de agosto de 2025, 22:30") == "11 August 2025, 22:30"
        assert normalize_international("11. August 2025, 22:30 Uhr") == "11 August 2025, 22:30"

    def test_parse_generic_without_date(self):
        assert parse_generic("no date here") is None


class TestExtractionStats:
    """Test cases for the extraction statistics accumulator."""

    def test_injected_stats_are_isolated(self, resolver, stats):
        """Test an injected accumulator leaves the process-wide one alone."""
        before = get_extraction_stats()

        resolver.resolve("Aug 11, 2025, 10:30:00 PM CDT")
        resolver.resolve("Some random text with no date")

        snapshot = stats.snapshot()
        assert snapshot["total_attempts"] == 2
        assert snapshot["successful_extractions"] == 1
        assert snapshot["failed_extractions"] == 1
        assert snapshot["overall_success_rate"] == 50.0
        assert get_extraction_stats() == before

    def test_strategy_performance(self, resolver, stats):
        """Test attempts and successes of a stage are counted under one key."""
        resolver.resolve("Aug 11, 2025, 10:30:00 PM CDT")
        resolver.resolve("Aug 11, 2025, 10:30:00 PM IST")
        performance = {
            entry["strategy"]: entry for entry in stats.snapshot()["strategy_performance"]
        }

        assert performance["pattern"]["attempts"] == 2
        assert performance["pattern"]["successes"] == 1
        assert performance["pattern"]["success_rate"] == 50.0
        assert performance["pattern"]["parsers"] == {"manual-primary": 2}
        assert performance["fallback"]["attempts"] == 1
        assert performance["fallback"]["successes"] == 0

    def test_stats_do_not_influence_resolution(self, stats):
        """Test a busy accumulator gives the same result as a fresh one."""
        for _ in range(50):
            stats.record_attempt()
            stats.record_result(False)
            stats.record_strategy("pattern", False)

        busy = TimestampResolver(stats=stats).resolve("Aug 11, 2025, 10:30:00 PM CDT")
        fresh = TimestampResolver(stats=ExtractionStats()).resolve(
            "Aug 11, 2025, 10:30:00 PM CDT"
        )
        assert busy.timestamp == fresh.timestamp
        assert busy.confidence == fresh.confidence
        assert busy.strategy == fresh.strategy

    def test_process_wide_stats_reset(self):
        """Test the module helpers record into and reset the default accumulator."""
        reset_extraction_stats()
        extract_timestamp("Aug 11, 2025, 10:30:00 PM CDT")
        assert get_extraction_stats()["total_attempts"] == 1

        reset_extraction_stats()
        assert get_extraction_stats()["total_attempts"] == 0
        assert get_extraction_stats()["strategy_performance"] == []
