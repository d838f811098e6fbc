"""
Import diagnostics computed from a record sequence.
"""

from typing import Optional, Sequence

from watch_history.shared.schemas.dto import (
    DateRange,
    ImportSummary,
    Product,
    ProductBreakdown,
    TimestampParsingStats,
    WatchRecord,
)
from watch_history.shared.utils.configs import base_configs
from watch_history.timestamps.stats import ExtractionStats


def compute_timestamp_stats(
    records: Sequence[WatchRecord], min_confidence: Optional[int] = None
) -> TimestampParsingStats:
    """
    Timestamp diagnostics of a record sequence.

    Everything is derived from the records themselves, so the numbers are
    the same whether the records were just parsed or loaded back later.

    Args:
        records: Records to inspect
        min_confidence: Threshold the records were resolved with

    Returns:
        TimestampParsingStats
    """
    if min_confidence is None:
        min_confidence = base_configs["min_timestamp_confidence"]

    stats = TimestampParsingStats(total_records=len(records))
    confidence_total = 0

    for record in records:
        if record.watched_at is None:
            stats.records_without_timestamps += 1
            if record.raw_timestamp:
                stats.timestamp_extraction_failures += 1
                if 0 < record.timestamp_confidence < min_confidence:
                    stats.low_confidence_extractions += 1
            continue

        stats.records_with_timestamps += 1
        confidence_total += record.timestamp_confidence
        if record.timestamp_strategy:
            stats.strategy_usage[record.timestamp_strategy] = (
                stats.strategy_usage.get(record.timestamp_strategy, 0) + 1
            )
        quality = record.timestamp_quality
        if quality is not None:
            stats.quality_metrics.with_timezones += int(quality.has_timezone)
            stats.quality_metrics.with_full_date_time += int(quality.has_full_time)
            stats.quality_metrics.format_recognized += int(quality.format_recognized)
            stats.quality_metrics.date_reasonable += int(quality.date_reasonable)

    if stats.records_with_timestamps:
        stats.average_confidence = confidence_total / stats.records_with_timestamps
    if stats.total_records:
        stats.success_rate = stats.records_with_timestamps / stats.total_records * 100
    return stats


def generate_summary(
    records: Sequence[WatchRecord],
    min_confidence: Optional[int] = None,
    extraction_stats: Optional[ExtractionStats] = None,
) -> ImportSummary:
    """
    Fold a record sequence into an import summary.

    Args:
        records: Final records of an import
        min_confidence: Threshold the records were resolved with
        extraction_stats: Resolver counters to snapshot into the summary

    Returns:
        ImportSummary
    """
    instants = [record.watched_at for record in records if record.watched_at]
    breakdown = ProductBreakdown()
    for record in records:
        if record.product == Product.YOUTUBE_MUSIC:
            breakdown.youtube_music += 1
        else:
            breakdown.youtube += 1

    return ImportSummary(
        total_records=len(records),
        unique_channels=len(
            {record.channel_title for record in records if record.channel_title}
        ),
        date_range=DateRange(
            start=min(instants) if instants else None,
            end=max(instants) if instants else None,
        ),
        product_breakdown=breakdown,
        parse_errors=sum(
            1
            for record in records
            if record.watched_at is None and not record.raw_timestamp
        ),
        timestamp_stats=compute_timestamp_stats(records, min_confidence),
        extraction_stats=extraction_stats.snapshot() if extraction_stats else None,
    )
