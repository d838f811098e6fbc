"""
Data Transfer Objects (DTOs) for the application.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from watch_history.shared.utils.types import ProgressMessage


class Product(Enum):
    """The service an entry was recorded under."""

    YOUTUBE = "YouTube"
    YOUTUBE_MUSIC = "YouTube Music"


@dataclass
class VideoRef:
    """
    A reference to the watched item.

    Attributes:
        video_id (str): The id taken from the watch or shorts URL.
        title (str): The display title of the item.
        url (str): The watch URL as it appears in the export.
    """

    video_id: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None


@dataclass
class ChannelRef:
    """
    A reference to the channel that published the watched item.

    Attributes:
        channel_id (str): A channel id, an "@handle" or a custom/user name.
        title (str): The display name of the channel.
        url (str): The channel URL as it appears in the export.
    """

    channel_id: Optional[str] = None
    title: Optional[str] = None
    url: Optional[str] = None


@dataclass
class TimestampQuality:
    """
    Quality markers of a raw timestamp, recorded whether or not it was accepted.

    Attributes:
        has_timezone (bool): A recognized timezone abbreviation was present.
        has_full_time (bool): The time of day had seconds precision.
        format_recognized (bool): The text used the named-month export format.
        date_reasonable (bool): The resolved year fell in the plausible range.
    """

    has_timezone: bool = False
    has_full_time: bool = False
    format_recognized: bool = False
    date_reasonable: bool = False


@dataclass
class ExtractionMetrics:
    extraction_time_ms: float = 0.0
    attempts_count: int = 0
    pattern_match_count: int = 0
    fallback_used: bool = False


@dataclass
class ExtractionAttempt:
    """One step of the resolver, only collected in debug mode."""

    strategy: str
    raw_input: str
    result: str
    confidence: int = 0
    time_ms: float = 0.0
    error: Optional[str] = None


@dataclass
class TimestampExtractionResult:
    """
    Outcome of resolving one raw timestamp text.

    ``raw_timestamp``, ``confidence`` and ``quality`` are filled in whenever a
    timestamp-shaped substring was found, even when the result was rejected
    by the confidence or reasonableness gate. ``timestamp`` is only set on
    acceptance and is always an aware UTC datetime.

    Attributes:
        timestamp (datetime): The resolved instant, or None.
        raw_timestamp (str): The substring that matched a timestamp pattern.
        strategy (str): "<origin>-<parser>" of the accepted resolution.
        confidence (int): Heuristic trust score, 0-100.
        quality (TimestampQuality): Quality markers of the raw text.
        metrics (ExtractionMetrics): Timing and attempt counters.
        debug_attempts (List[ExtractionAttempt]): Attempt trail in debug mode.
    """

    timestamp: Optional[datetime] = None
    raw_timestamp: Optional[str] = None
    strategy: Optional[str] = None
    confidence: int = 0
    quality: TimestampQuality = field(default_factory=TimestampQuality)
    metrics: ExtractionMetrics = field(default_factory=ExtractionMetrics)
    debug_attempts: Optional[List[ExtractionAttempt]] = None

    @property
    def success(self) -> bool:
        return self.timestamp is not None


@dataclass
class RawEntry:
    """
    Raw fields pulled from one entry of the export.

    Attributes:
        video (VideoRef): The watched item, if a watch link was found.
        channel (ChannelRef): The channel, if a channel link was found.
        raw_timestamp (str): The timestamp-shaped text found in the entry.
        product (Product): The service the entry was recorded under.
        is_ad (bool): The entry is an advertisement and must be dropped.
        timestamp_result (TimestampExtractionResult): The resolver's verdict.
    """

    video: Optional[VideoRef] = None
    channel: Optional[ChannelRef] = None
    raw_timestamp: Optional[str] = None
    product: Product = Product.YOUTUBE
    is_ad: bool = False
    timestamp_result: Optional[TimestampExtractionResult] = None

    def has_required_fields(self) -> bool:
        return self.video is not None or bool(self.raw_timestamp)


@dataclass
class WatchRecord:
    """
    Canonical watch event consumed by storage and aggregation.

    The calendar fields (year, month, week, day_of_week, hour, yoy_key) are
    either all set or all None, matching ``watched_at``. ``raw_timestamp``
    keeps the exported text verbatim so a record can be re-resolved later
    without the source document.

    Attributes:
        id (str): Fingerprint plus a short uniqueness suffix.
        fingerprint (str): Content hash of url, raw timestamp and title.
        watched_at (datetime): The resolved instant in UTC, or None.
        video_id (str): Id of the watched item.
        video_title (str): Title of the watched item.
        video_url (str): URL of the watched item.
        channel_id (str): Channel id, handle or name from the channel URL.
        channel_title (str): Display name of the channel.
        channel_url (str): URL of the channel.
        product (Product): YouTube or YouTube Music.
        year (int): Calendar year in the display timezone.
        month (int): Month 1-12.
        week (int): ISO week number.
        day_of_week (int): 0 = Sunday .. 6 = Saturday.
        hour (int): Hour of day 0-23.
        yoy_key (str): "YYYY-MM" key for year-over-year joins.
        raw_timestamp (str): Timestamp text as found in the export.
        timestamp_confidence (int): Confidence reported by the resolver.
        timestamp_strategy (str): Strategy that resolved the instant.
        timestamp_quality (TimestampQuality): Quality markers of the raw text.
    """

    id: str
    fingerprint: str
    watched_at: Optional[datetime] = None
    video_id: Optional[str] = None
    video_title: Optional[str] = None
    video_url: Optional[str] = None
    channel_id: Optional[str] = None
    channel_title: Optional[str] = None
    channel_url: Optional[str] = None
    product: Product = Product.YOUTUBE
    year: Optional[int] = None
    month: Optional[int] = None
    week: Optional[int] = None
    day_of_week: Optional[int] = None
    hour: Optional[int] = None
    yoy_key: Optional[str] = None
    raw_timestamp: Optional[str] = None
    timestamp_confidence: int = 0
    timestamp_strategy: Optional[str] = None
    timestamp_quality: Optional[TimestampQuality] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the WatchRecord to a dictionary for JSON serialization.

        Returns:
            dict: A dictionary representation of the WatchRecord
        """
        return {
            "id": self.id,
            "fingerprint": self.fingerprint,
            "watched_at": self.watched_at.isoformat() if self.watched_at else None,
            "video_id": self.video_id,
            "video_title": self.video_title,
            "video_url": self.video_url,
            "channel_id": self.channel_id,
            "channel_title": self.channel_title,
            "channel_url": self.channel_url,
            "product": self.product.value,
            "year": self.year,
            "month": self.month,
            "week": self.week,
            "day_of_week": self.day_of_week,
            "hour": self.hour,
            "yoy_key": self.yoy_key,
            "raw_timestamp": self.raw_timestamp,
            "timestamp_confidence": self.timestamp_confidence,
            "timestamp_strategy": self.timestamp_strategy,
            "timestamp_quality": (
                asdict(self.timestamp_quality) if self.timestamp_quality else None
            ),
        }

    def content_dict(self) -> Dict[str, Any]:
        """The record without its per-import uniqueness suffix."""
        content = self.to_dict()
        content.pop("id")
        return content


@dataclass
class ChunkProgress:
    """
    Scheduling state reported to progress callbacks.

    Attributes:
        processed (int): Records produced so far.
        total (int): Estimated total records, extrapolated from finished chunks.
        percentage (float): Share of chunks finished, 0-100.
        eta (float): Estimated seconds remaining.
        current_chunk (int): 1-based index of the last finished chunk.
        total_chunks (int): Number of chunks in the document.
    """

    processed: int
    total: int
    percentage: float
    eta: float
    current_chunk: int
    total_chunks: int

    def to_message(self) -> ProgressMessage:
        return {
            "type": "progress",
            "processed": self.processed,
            "total": self.total,
            "percentage": self.percentage,
            "eta": self.eta,
            "current_chunk": self.current_chunk,
            "total_chunks": self.total_chunks,
        }


@dataclass
class QualityMetrics:
    with_timezones: int = 0
    with_full_date_time: int = 0
    format_recognized: int = 0
    date_reasonable: int = 0


@dataclass
class TimestampParsingStats:
    """
    Timestamp diagnostics computed from a record sequence.

    Attributes:
        total_records (int): Records in the sequence.
        records_with_timestamps (int): Records with a resolved instant.
        records_without_timestamps (int): Records without a resolved instant.
        timestamp_extraction_failures (int): Records whose raw text was found
            but could not be resolved.
        low_confidence_extractions (int): Failures that produced a candidate
            but scored under the confidence threshold.
        average_confidence (float): Mean confidence of resolved records.
        success_rate (float): Resolved share of all records, 0-100.
        strategy_usage (Dict[str, int]): Resolved records per strategy.
        quality_metrics (QualityMetrics): Quality markers of resolved records.
    """

    total_records: int = 0
    records_with_timestamps: int = 0
    records_without_timestamps: int = 0
    timestamp_extraction_failures: int = 0
    low_confidence_extractions: int = 0
    average_confidence: float = 0.0
    success_rate: float = 0.0
    strategy_usage: Dict[str, int] = field(default_factory=dict)
    quality_metrics: QualityMetrics = field(default_factory=QualityMetrics)


@dataclass
class DateRange:
    start: Optional[datetime] = None
    end: Optional[datetime] = None


@dataclass
class ProductBreakdown:
    youtube: int = 0
    youtube_music: int = 0


@dataclass
class ImportSummary:
    """
    Import diagnostics folded from the final record sequence.

    Attributes:
        total_records (int): Number of records.
        unique_channels (int): Distinct channel titles.
        date_range (DateRange): Earliest and latest resolved instants.
        product_breakdown (ProductBreakdown): Records per product.
        parse_errors (int): Records carrying neither instant nor raw text.
        timestamp_stats (TimestampParsingStats): Timestamp diagnostics.
        extraction_stats (Dict[str, Any]): Snapshot of the resolver counters.
    """

    total_records: int
    unique_channels: int
    date_range: DateRange
    product_breakdown: ProductBreakdown
    parse_errors: int = 0
    timestamp_stats: TimestampParsingStats = field(
        default_factory=TimestampParsingStats
    )
    extraction_stats: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the ImportSummary to a dictionary for JSON serialization.

        Returns:
            dict: A dictionary representation of the ImportSummary
        """
        summary = asdict(self)
        summary["date_range"] = {
            "start": self.date_range.start.isoformat() if self.date_range.start else None,
            "end": self.date_range.end.isoformat() if self.date_range.end else None,
        }
        return summary


@dataclass
class MigrationResult:
    total_records: int = 0
    records_with_raw_timestamp: int = 0
    successfully_migrated: int = 0
    failed: int = 0
    already_had_timestamp: int = 0
