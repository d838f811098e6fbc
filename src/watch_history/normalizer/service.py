"""
Normalizer for turning raw extracted entries into canonical watch records.
"""

import hashlib
import re
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

from watch_history.shared.schemas.dto import RawEntry, WatchRecord
from watch_history.shared.utils.configs import base_configs
from watch_history.shared.utils.errors import NormalizationError
from watch_history.shared.utils.logger import logger

VIDEO_ID_RE = re.compile(r"(?:[?&]v=|/shorts/)([A-Za-z0-9_-]+)")
CHANNEL_ID_RE = re.compile(r"/(?:channel/([^/?#&\"]+)|(@[^/?#&\"]+)|c/([^/?#&\"]+)|user/([^/?#&\"]+))")


def generate_fingerprint(video_url: str, raw_timestamp: str, title: str) -> str:
    """
    Content hash of an entry.

    Two entries with the same url, raw timestamp text and title share a
    fingerprint, whichever chunk or import they came from.
    """
    payload = f"{video_url or ''}|{raw_timestamp or ''}|{title or ''}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def extract_video_id(url: Optional[str]) -> Optional[str]:
    if not url:
        return None
    match = VIDEO_ID_RE.search(url)
    return match.group(1) if match else None


def extract_channel_id(url: Optional[str]) -> Optional[str]:
    """
    Channel identity from a channel URL: the channel id, the "@handle", or
    the custom/user name, in that order of preference.
    """
    if not url:
        return None
    match = CHANNEL_ID_RE.search(url)
    if not match:
        return None
    return next(group for group in match.groups() if group)


def derive_calendar_fields(
    instant: datetime, display_timezone: Optional[pytz.BaseTzInfo] = None
) -> Dict[str, Any]:
    """
    Calendar fields of an instant, read in the display timezone.

    Args:
        instant: Aware datetime
        display_timezone: Zone the fields are computed in

    Returns:
        dict: year, month, week (ISO), day_of_week (0 = Sunday), hour, yoy_key
    """
    local = instant.astimezone(display_timezone or base_configs["timezone"])
    return {
        "year": local.year,
        "month": local.month,
        "week": local.isocalendar()[1],
        "day_of_week": (local.weekday() + 1) % 7,
        "hour": local.hour,
        "yoy_key": f"{local.year}-{local.month:02d}",
    }


class RecordNormalizer:
    """
    Builds a WatchRecord from a RawEntry.
    """

    def __init__(self, display_timezone: Optional[pytz.BaseTzInfo] = None):
        self.display_timezone = display_timezone or base_configs["timezone"]

    def normalize(self, raw: RawEntry) -> Optional[WatchRecord]:
        """
        Normalize one raw entry.

        Args:
            raw: Entry produced by the extractor

        Returns:
            WatchRecord, or None when the entry lacks both a video and a raw
            timestamp, or could not be normalized
        """
        try:
            return self.build_record(raw)
        except NormalizationError as e:
            logger.debug(f"Skipping entry: {e.message}")
            return None
        except Exception as e:
            logger.warning(f"Failed to normalize entry: {e}")
            return None

    def build_record(self, raw: RawEntry) -> WatchRecord:
        if not raw.has_required_fields():
            raise NormalizationError("Entry has neither a video link nor a timestamp")

        video = raw.video
        channel = raw.channel
        result = raw.timestamp_result
        raw_timestamp = raw.raw_timestamp or (result.raw_timestamp if result else None)

        video_url = video.url if video else None
        video_title = video.title if video else None
        fingerprint = generate_fingerprint(video_url, raw_timestamp, video_title)

        record = WatchRecord(
            id=f"{fingerprint}-{uuid.uuid4().hex[:4]}",
            fingerprint=fingerprint,
            video_id=(video.video_id if video and video.video_id else None)
            or extract_video_id(video_url),
            video_title=video_title or None,
            video_url=video_url or None,
            channel_id=(channel.channel_id if channel and channel.channel_id else None)
            or extract_channel_id(channel.url if channel else None),
            channel_title=(channel.title if channel else None) or None,
            channel_url=(channel.url if channel else None) or None,
            product=raw.product,
            raw_timestamp=raw_timestamp,
        )

        if result is not None:
            record.timestamp_confidence = result.confidence
            record.timestamp_quality = result.quality
            if result.timestamp is not None:
                record.watched_at = result.timestamp
                record.timestamp_strategy = result.strategy
                for key, value in derive_calendar_fields(
                    result.timestamp, self.display_timezone
                ).items():
                    setattr(record, key, value)

        return record
