"""
Configuration settings for the application.
"""

import os
from typing import Tuple, TypedDict

import pytz
from dotenv import load_dotenv

load_dotenv()  # Load variables from .env

KIB = 1024
MIB = 1024 * KIB


class BaseConfig(TypedDict):
    """Type definition for base configuration values.

    Attributes:
        timezone: pytz timezone used for exports without a timezone marker,
            and for the derived calendar fields
        min_timestamp_confidence: Confidence (0-100) a timestamp needs to be accepted
        frame_budget_seconds: Per-chunk time after which the scheduler yields
        platform_founding_year: Earliest plausible year for a watch event
        ad_markers: Phrases that flag an entry as an advertisement
        music_caption_marker: Caption phrase that flags the music product
        music_text_marker: Entry text phrase that flags the music product
    """

    timezone: pytz.BaseTzInfo
    min_timestamp_confidence: int
    frame_budget_seconds: float
    platform_founding_year: int
    ad_markers: Tuple[str, ...]
    music_caption_marker: str
    music_text_marker: str


class ChunkConfig(TypedDict):
    """Type definition for chunking and buffering values.

    Attributes:
        base_chunk_size: Chunk size for average tag density
        min_chunk_size: Floor for dense markup
        max_chunk_size: Ceiling for sparse markup
        dense_threshold: Tags per KB above which markup counts as dense
        sparse_threshold: Tags per KB below which markup counts as sparse
        boundary_window: Forward search window for an entry container start
        lookback_window: Backward search window for the enclosing container start
        close_tag_window: Forward search window for an element-closing ">"
        context_window: Pattern fallback context on each side of a watch link
        stream_buffer_limit: Streaming look-back buffer soft cap
        stream_buffer_keep: Characters kept when the soft cap is exceeded
    """

    base_chunk_size: int
    min_chunk_size: int
    max_chunk_size: int
    dense_threshold: int
    sparse_threshold: int
    boundary_window: int
    lookback_window: int
    close_tag_window: int
    context_window: int
    stream_buffer_limit: int
    stream_buffer_keep: int


base_configs: BaseConfig = {
    "timezone": pytz.timezone(os.getenv("DEFAULT_TIMEZONE", "America/Chicago")),
    "min_timestamp_confidence": int(os.getenv("MIN_TIMESTAMP_CONFIDENCE", 70)),
    "frame_budget_seconds": float(os.getenv("FRAME_BUDGET_MS", 16.67)) / 1000,
    "platform_founding_year": 2005,
    "ad_markers": ("Viewed Ads On YouTube",),
    "music_caption_marker": "YouTube Music",
    "music_text_marker": "Listened to",
}

chunk_configs: ChunkConfig = {
    "base_chunk_size": 1 * MIB,
    "min_chunk_size": 512 * KIB,
    "max_chunk_size": 2 * MIB,
    "dense_threshold": 50,
    "sparse_threshold": 10,
    "boundary_window": 2000,
    "lookback_window": 4000,
    "close_tag_window": 1000,
    "context_window": 1500,
    "stream_buffer_limit": 10 * MIB,
    "stream_buffer_keep": 5 * MIB,
}
