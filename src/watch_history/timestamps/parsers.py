"""
Parse strategies for a matched timestamp substring.

Each strategy is a pure function taking the substring (timezone abbreviation
already removed) and returning a datetime, or None when it does not apply.
Returned datetimes are naive unless the text carried an explicit offset.
"""

import re
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from dateutil import parser as date_parser

from watch_history.timestamps.patterns import (
    ENGLISH_MONTH_NAMES,
    ENGLISH_MONTHS,
    INTERNATIONAL_MONTHS,
)

ParseStrategy = Callable[[str], Optional[datetime]]

_PRIMARY_RE = re.compile(
    r"([A-Za-z]{3})[A-Za-z]*\.? (\d{1,2}), (\d{4}),? (\d{1,2}):(\d{2}):(\d{2}) ([AP]M)"
)
_NUMERIC_RE = re.compile(
    r"(\d{1,2})/(\d{1,2})/(\d{4}),?\s+(\d{1,2}):(\d{2}):(\d{2})\s+([AP]M)"
)
_WATCHED_AT_RE = re.compile(
    r"Watched at (\d{1,2}):(\d{2}) ([AP]M).*?([A-Za-z]{3})[A-Za-z]* (\d{1,2}), (\d{4})"
)
_CJK_RE = re.compile(r"(\d{4})年(\d{1,2})月(\d{1,2})日 ?(\d{1,2}):(\d{2})")

_WORD_RE = re.compile(r"\w+")
_CONNECTOR_RE = re.compile(r"\b(?:à|às|de|alle|om|Uhr)\b")
_HOUR_MARK_RE = re.compile(r"(\d{1,2})h(\d{2})")
_DAY_DOT_RE = re.compile(r"\b(\d{1,2})\. ")
_BULLET_RE = re.compile(r" [•·] ")
_SPACES_RE = re.compile(r"\s+")

FORMAT_TABLE: List[str] = [
    "%b %d, %Y, %I:%M:%S %p",
    "%b %d, %Y %I:%M:%S %p",
    "%B %d, %Y, %I:%M:%S %p",
    "%B %d, %Y %I:%M:%S %p",
    "%m/%d/%Y, %I:%M:%S %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%d.%m.%Y, %H:%M:%S",
    "%d.%m.%Y %H:%M:%S",
    "%b %d, %Y at %I:%M %p",
    "%B %d, %Y at %I:%M %p",
    "%b %d, %Y %I:%M %p",
    "%d %B %Y, %H:%M:%S",
    "%d %B %Y %H:%M:%S",
    "%d %b %Y, %H:%M:%S",
    "%d %b %Y %H:%M:%S",
    "%d %B %Y, %H:%M",
    "%d %B %Y %H:%M",
]

# Generic parsing fills missing components from here, so a text without a
# year lands outside the plausible range instead of in the current year.
GENERIC_DEFAULT = datetime(1900, 1, 1)


def to_24_hour(hour: int, meridiem: str) -> int:
    if meridiem == "PM" and hour < 12:
        return hour + 12
    if meridiem == "AM" and hour == 12:
        return 0
    return hour


def parse_primary(text: str) -> Optional[datetime]:
    """Mon D, YYYY, H:MM:SS AM/PM"""
    match = _PRIMARY_RE.search(text)
    if not match:
        return None
    month_str, day, year, hour, minute, second, meridiem = match.groups()
    month = ENGLISH_MONTHS.get(month_str.lower())
    if month is None:
        return None
    return datetime(
        int(year),
        month,
        int(day),
        to_24_hour(int(hour), meridiem),
        int(minute),
        int(second),
    )


def parse_numeric(text: str) -> Optional[datetime]:
    """M/D/YYYY, H:MM:SS AM/PM"""
    match = _NUMERIC_RE.search(text)
    if not match:
        return None
    month, day, year, hour, minute, second, meridiem = match.groups()
    return datetime(
        int(year),
        int(month),
        int(day),
        to_24_hour(int(hour), meridiem),
        int(minute),
        int(second),
    )


def parse_watched_at(text: str) -> Optional[datetime]:
    """Watched at H:MM AM/PM ... Mon D, YYYY"""
    match = _WATCHED_AT_RE.search(text)
    if not match:
        return None
    hour, minute, meridiem, month_str, day, year = match.groups()
    month = ENGLISH_MONTHS.get(month_str.lower())
    if month is None:
        return None
    return datetime(
        int(year), month, int(day), to_24_hour(int(hour), meridiem), int(minute)
    )


def parse_cjk(text: str) -> Optional[datetime]:
    """YYYY年M月D日 H:MM"""
    match = _CJK_RE.search(text)
    if not match:
        return None
    year, month, day, hour, minute = (int(part) for part in match.groups())
    return datetime(year, month, day, hour, minute)


def normalize_international(text: str) -> str:
    """
    Rewrite localized month names and connectors into an English layout.

    "11 de agosto de 2025, 22:30" becomes "11 August 2025, 22:30" so the
    format table can read it.
    """

    def _month(match: re.Match) -> str:
        month = INTERNATIONAL_MONTHS.get(match.group(0).lower())
        return ENGLISH_MONTH_NAMES[month - 1] if month else match.group(0)

    text = _WORD_RE.sub(_month, text)
    text = _CONNECTOR_RE.sub(" ", text)
    text = _HOUR_MARK_RE.sub(r"\1:\2", text)
    text = _DAY_DOT_RE.sub(r"\1 ", text)
    text = _BULLET_RE.sub(" ", text)
    text = _SPACES_RE.sub(" ", text).strip()
    return text.replace(" ,", ",")


def parse_format_table(text: str) -> Optional[datetime]:
    normalized = normalize_international(text)
    for layout in FORMAT_TABLE:
        try:
            return datetime.strptime(normalized, layout)
        except ValueError:
            continue
    return None


def parse_generic(text: str) -> Optional[datetime]:
    try:
        return date_parser.parse(normalize_international(text), default=GENERIC_DEFAULT)
    except (ValueError, OverflowError):
        return None


PARSE_STRATEGIES: List[Tuple[str, ParseStrategy]] = [
    ("manual-primary", parse_primary),
    ("manual-numeric", parse_numeric),
    ("manual-watched-at", parse_watched_at),
    ("manual-cjk", parse_cjk),
    ("format-table", parse_format_table),
    ("generic", parse_generic),
]
