"""
Watch history ETL: turns an exported watch-history page into typed watch records.
"""

from watch_history.migration import (
    analyze_migration_needs,
    migrate_record_timestamp,
    migrate_records_timestamps,
    needs_timestamp_migration,
)
from watch_history.scheduler import (
    FrameBudgetYieldPolicy,
    ParserService,
    ParsingOptions,
    parse,
    parse_stream,
    parse_sync,
)
from watch_history.shared.schemas import (
    ChunkProgress,
    ImportSummary,
    MigrationResult,
    Product,
    TimestampExtractionResult,
    WatchRecord,
)
from watch_history.summary import generate_summary
from watch_history.timestamps import (
    ExtractionStats,
    TimestampResolver,
    extract_timestamp,
    get_extraction_stats,
    reset_extraction_stats,
)
from watch_history.worker import DirectExecutor, OffloadExecutor

__version__ = "0.1.0"
