"""
Entry extraction from the exported history markup.
"""

from .fallback import extract_entries_by_pattern
from .service import EntryExtractor
