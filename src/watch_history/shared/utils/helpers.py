"""
Utility functions for the application.
"""

import html
import json
import re
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum

# NBSP, narrow NBSP, thin/hair spaces, zero width space, line/paragraph separators
_SPACE_VARIANTS_RE = re.compile(r"[\u00a0\u202f\u2009\u200a\u200b\u2028\u2029]")
_WHITESPACE_RE = re.compile(r"\s+")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")


class WatchRecordEncoder(json.JSONEncoder):
    """
    Custom JSON encoder for serializing records and summaries into JSON format.

    This encoder handles the following types:
    - WatchRecord, ImportSummary (anything with `to_dict`): Uses their own
        `to_dict`, so datetimes and enums come out the same as elsewhere.
    - Other dataclasses: Converts them to dictionaries using `asdict`.
    - datetime, date: Converts them to ISO 8601 formatted strings.
    - Enum: Converts members to their values.

    For other object types, the default JSONEncoder behavior is used.
    """

    def default(self, obj):
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        elif is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        elif isinstance(obj, datetime):
            return obj.isoformat()
        elif isinstance(obj, date):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def sanitize_text(text: str) -> str:
    """
    Fold unicode space variants to plain spaces and collapse whitespace.

    Args:
        text: Raw text taken from the export

    Returns:
        Single-spaced, stripped text
    """
    if not text:
        return ""
    text = _SPACE_VARIANTS_RE.sub(" ", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def markup_to_text(markup: str) -> str:
    """
    Turn a markup fragment into sanitized text.

    Line breaks and other tags become spaces so text that was split across
    ``<br>`` elements stays separated. Character references are decoded.
    """
    if not markup:
        return ""
    text = _BR_RE.sub(" ", markup)
    text = _TAG_RE.sub(" ", text)
    return sanitize_text(html.unescape(text))
