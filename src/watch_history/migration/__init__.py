"""
Timestamp migration for stored records.
"""

from .service import (
    analyze_migration_needs,
    migrate_record_timestamp,
    migrate_records_timestamps,
    needs_timestamp_migration,
)
