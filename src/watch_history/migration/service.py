"""
Re-resolution of stored records whose timestamp could not be resolved at import.
"""

import dataclasses
from typing import List, Optional, Sequence, Tuple

from watch_history.normalizer.service import RecordNormalizer, derive_calendar_fields
from watch_history.shared.schemas.dto import MigrationResult, WatchRecord
from watch_history.shared.utils.logger import logger
from watch_history.timestamps.service import TimestampResolver


def migrate_record_timestamp(
    record: WatchRecord,
    resolver: Optional[TimestampResolver] = None,
    normalizer: Optional[RecordNormalizer] = None,
) -> WatchRecord:
    """
    Resolve the raw timestamp of a record again.

    Args:
        record: A stored record
        resolver: Resolver to use, a default one when None
        normalizer: Supplies the display timezone for the calendar fields

    Returns:
        A new record with the instant and calendar fields filled in, or the
        given record unchanged when it already has an instant, has no raw
        text, or still cannot be resolved
    """
    if record.watched_at is not None or not record.raw_timestamp:
        return record

    resolver = resolver or TimestampResolver()
    normalizer = normalizer or RecordNormalizer()
    try:
        result = resolver.resolve(record.raw_timestamp, record.raw_timestamp)
    except Exception as e:
        logger.warning(f"Failed to migrate timestamp for record {record.id}: {e}")
        return record

    if result.timestamp is None:
        return record

    return dataclasses.replace(
        record,
        watched_at=result.timestamp,
        timestamp_confidence=result.confidence,
        timestamp_strategy=result.strategy,
        timestamp_quality=result.quality,
        **derive_calendar_fields(result.timestamp, normalizer.display_timezone),
    )


def migrate_records_timestamps(
    records: Sequence[WatchRecord],
    resolver: Optional[TimestampResolver] = None,
    normalizer: Optional[RecordNormalizer] = None,
) -> Tuple[List[WatchRecord], MigrationResult]:
    """
    Migrate every record that lacks an instant but kept its raw text.

    Args:
        records: Stored records
        resolver: Resolver shared by all records
        normalizer: Supplies the display timezone for the calendar fields

    Returns:
        The records in the same order, and the migration counts
    """
    resolver = resolver or TimestampResolver()
    normalizer = normalizer or RecordNormalizer()
    result = MigrationResult(total_records=len(records))
    migrated_records = []

    for record in records:
        if record.watched_at is not None:
            result.already_had_timestamp += 1
            migrated_records.append(record)
            continue
        if not record.raw_timestamp:
            migrated_records.append(record)
            continue

        result.records_with_raw_timestamp += 1
        migrated = migrate_record_timestamp(record, resolver, normalizer)
        if migrated.watched_at is not None:
            result.successfully_migrated += 1
        else:
            result.failed += 1
        migrated_records.append(migrated)

    logger.info(
        f"Timestamp migration: {result.successfully_migrated}/"
        f"{result.records_with_raw_timestamp} migrated, {result.failed} failed, "
        f"{result.already_had_timestamp} already resolved"
    )
    return migrated_records, result


def needs_timestamp_migration(records: Sequence[WatchRecord]) -> bool:
    return any(
        record.watched_at is None and record.raw_timestamp for record in records
    )


def analyze_migration_needs(records: Sequence[WatchRecord]) -> MigrationResult:
    """
    Count what a migration would touch, without resolving anything.
    """
    result = MigrationResult(total_records=len(records))
    for record in records:
        if record.watched_at is not None:
            result.already_had_timestamp += 1
        elif record.raw_timestamp:
            result.records_with_raw_timestamp += 1
    return result
