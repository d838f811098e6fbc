"""
Timestamp resolution: patterns, parse strategies, confidence scoring.
"""

from .service import (
    TimestampResolver,
    extract_timestamp,
    get_extraction_stats,
    reset_extraction_stats,
)
from .stats import ExtractionStats, default_stats
