"""
Data transfer objects shared across the pipeline.
"""

from .dto import (
    ChannelRef,
    ChunkProgress,
    DateRange,
    ExtractionAttempt,
    ExtractionMetrics,
    ImportSummary,
    MigrationResult,
    Product,
    ProductBreakdown,
    QualityMetrics,
    RawEntry,
    TimestampExtractionResult,
    TimestampParsingStats,
    TimestampQuality,
    VideoRef,
    WatchRecord,
)
