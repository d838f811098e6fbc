"""
Timestamp patterns and lookup tables used by the resolver.

Every pattern captures the timestamp-shaped substring in group 1. The lists
are ordered most specific first; the first match wins.
"""

import re
from typing import Dict, List, Pattern

# Offsets in minutes east of UTC
TIMEZONE_OFFSETS: Dict[str, int] = {
    "CDT": -5 * 60,
    "CST": -6 * 60,
    "EDT": -4 * 60,
    "EST": -5 * 60,
    "PDT": -7 * 60,
    "PST": -8 * 60,
    "MDT": -6 * 60,
    "MST": -7 * 60,
    "AKDT": -8 * 60,
    "AKST": -9 * 60,
    "HDT": -9 * 60,
    "HST": -10 * 60,
    "UTC": 0,
    "GMT": 0,
    "BST": 1 * 60,
    "CET": 1 * 60,
    "CEST": 2 * 60,
    "JST": 9 * 60,
}

TIMEZONE_RE = re.compile(
    r"\b(%s)\b" % "|".join(sorted(TIMEZONE_OFFSETS, key=len, reverse=True))
)
TRAILING_TIMEZONE_RE = re.compile(
    r"\s*\b(?:%s)\b" % "|".join(sorted(TIMEZONE_OFFSETS, key=len, reverse=True))
)
# Any zone-like abbreviation right after a clock time, known or not
CLOCK_ABBREVIATION_RE = re.compile(
    r"\d{1,2}:\d{2}(?::\d{2})?(?: [AP]M)? (?![AP]M\b)([A-Z]{2,5})\b"
)

ENGLISH_MONTHS: Dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

ENGLISH_MONTH_NAMES: List[str] = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

# French, German, Spanish, Portuguese, Italian and Dutch month names
INTERNATIONAL_MONTHS: Dict[str, int] = {
    "janvier": 1,
    "février": 2,
    "fevrier": 2,
    "mars": 3,
    "avril": 4,
    "mai": 5,
    "juin": 6,
    "juillet": 7,
    "août": 8,
    "aout": 8,
    "septembre": 9,
    "octobre": 10,
    "novembre": 11,
    "décembre": 12,
    "decembre": 12,
    "januar": 1,
    "februar": 2,
    "märz": 3,
    "maerz": 3,
    "juni": 6,
    "juli": 7,
    "oktober": 10,
    "dezember": 12,
    "enero": 1,
    "febrero": 2,
    "marzo": 3,
    "abril": 4,
    "mayo": 5,
    "junio": 6,
    "julio": 7,
    "agosto": 8,
    "septiembre": 9,
    "setiembre": 9,
    "octubre": 10,
    "noviembre": 11,
    "diciembre": 12,
    "janeiro": 1,
    "fevereiro": 2,
    "março": 3,
    "marco": 3,
    "maio": 5,
    "junho": 6,
    "julho": 7,
    "setembro": 9,
    "outubro": 10,
    "novembro": 11,
    "dezembro": 12,
    "gennaio": 1,
    "febbraio": 2,
    "aprile": 4,
    "maggio": 5,
    "giugno": 6,
    "luglio": 7,
    "settembre": 9,
    "ottobre": 10,
    "dicembre": 12,
    "januari": 1,
    "februari": 2,
    "maart": 3,
    "mei": 5,
    "augustus": 8,
}

PRIMARY_PATTERNS: List[Pattern] = [
    # Aug 11, 2025, 10:30:00 PM CDT
    re.compile(
        r"([A-Za-z]{3,9}\.? \d{1,2}, \d{4},? \d{1,2}:\d{2}:\d{2} [AP]M [A-Z]{3,4})\b"
    ),
    # Aug 11, 2025, 10:30:00 PM
    re.compile(r"([A-Za-z]{3,9}\.? \d{1,2}, \d{4},? \d{1,2}:\d{2}:\d{2} [AP]M)\b"),
    # 8/11/2025, 10:30:00 PM
    re.compile(r"(\d{1,2}/\d{1,2}/\d{4},? \d{1,2}:\d{2}:\d{2} [AP]M(?: [A-Z]{3,4}\b)?)"),
    # 2025-08-11 22:30:00
    re.compile(r"(\d{4}[-/]\d{2}[-/]\d{2}[ T]\d{2}:\d{2}:\d{2})"),
    # 11.08.2025, 22:30:00
    re.compile(r"(\d{1,2}\.\d{1,2}\.\d{4},? \d{1,2}:\d{2}:\d{2})"),
    # Aug 11, 2025 at 10:30 PM
    re.compile(r"([A-Za-z]{3,9} \d{1,2}, \d{4} at \d{1,2}:\d{2} [AP]M)\b"),
    # Aug 11, 2025 • 10:30 PM
    re.compile(r"([A-Za-z]{3,9} \d{1,2}, \d{4} [•·] \d{1,2}:\d{2} [AP]M)\b"),
    # Watched at 10:30 PM ... Aug 11, 2025
    re.compile(r"(Watched at \d{1,2}:\d{2} [AP]M.{0,80}?[A-Za-z]{3,9} \d{1,2}, \d{4})"),
    # 11 August 2025, 22:30:00
    re.compile(r"(\d{1,2} [A-Za-z]{3,9} \d{4},? \d{1,2}:\d{2}:\d{2})"),
]

INTERNATIONAL_PATTERNS: List[Pattern] = [
    # 11 août 2025 à 22h30
    re.compile(r"(\d{1,2} \w{3,} \d{4} à \d{1,2}h\d{2})"),
    # 11. August 2025, 22:30 Uhr
    re.compile(r"(\d{1,2}\. \w{3,} \d{4}, \d{1,2}:\d{2} Uhr)"),
    # 11 de agosto de 2025, 22:30
    re.compile(r"(\d{1,2} de \w{3,} de \d{4}, \d{1,2}:\d{2})"),
    # 11 de agosto de 2025 às 22h30
    re.compile(r"(\d{1,2} de \w{3,} de \d{4} às \d{1,2}h\d{2})"),
    # 11 agosto 2025 alle 22:30
    re.compile(r"(\d{1,2} \w{3,} \d{4} alle \d{1,2}:\d{2})"),
    # 11 augustus 2025 om 22:30
    re.compile(r"(\d{1,2} \w{3,} \d{4} om \d{1,2}:\d{2})"),
    # 2025年8月11日 22:30
    re.compile(r"(\d{4}年\d{1,2}月\d{1,2}日 ?\d{1,2}:\d{2})"),
]

FALLBACK_PATTERNS: List[Pattern] = [
    # year first
    re.compile(r"(\d{4}[-/.]\d{1,2}[-/.]\d{1,2}[\s,]+\d{1,2}:\d{2})"),
    # numeric day or month first
    re.compile(r"(\d{1,2}[-/.]\d{1,2}[-/.]\d{4}[\s,]+\d{1,2}:\d{2})"),
    # month name first
    re.compile(r"([A-Za-z]{3,9} \d{1,2}[-/.,\s]+\d{4}[\s,]+\d{1,2}:\d{2})"),
    # time first
    re.compile(r"(\d{1,2}:\d{2}:\d{2}.{0,40}?\d{4})"),
    # any year, then any time
    re.compile(r"(\d{4}.{0,40}?\d{1,2}:\d{2})"),
]

# Scoring markers
MERIDIEM_RE = re.compile(r"\b[AP]M\b")
FOUR_DIGIT_YEAR_RE = re.compile(r"\d{4}")
SECONDS_RE = re.compile(r"\d{1,2}:\d{2}:\d{2}")
NAMED_MONTH_RE = re.compile(r"[A-Za-z]{3} \d{1,2}, \d{4}")
US_NUMERIC_RE = re.compile(r"\d{1,2}/\d{1,2}/\d{4}")
AMBIGUOUS_NUMERIC_RE = re.compile(r"\d{2}/\d{2}/\d{4}")
ISO_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
EURO_DOT_RE = re.compile(r"\d{1,2}\.\d{1,2}\.\d{4}")
NON_ENGLISH_CONNECTOR_RE = re.compile(r"\b(?:à|às|de|om|alle|um|Uhr)\b")

# Normalization of meridiem markers: "10:30pm", "10:30 p.m." -> "10:30 PM"
MERIDIEM_NORMALIZE_RE = re.compile(r"(\d)\s?([AaPp])\.?\s?[Mm]\.?(?![A-Za-z])")
