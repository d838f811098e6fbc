"""
Extractor for pulling watch entries out of a chunk of the exported history page.
"""

import re
from typing import Callable, List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from watch_history.extractor.fallback import extract_entries_by_pattern
from watch_history.normalizer.service import (
    RecordNormalizer,
    extract_channel_id,
    extract_video_id,
)
from watch_history.shared.schemas.dto import (
    ChannelRef,
    Product,
    RawEntry,
    VideoRef,
    WatchRecord,
)
from watch_history.shared.utils.configs import base_configs
from watch_history.shared.utils.errors import ExtractionError
from watch_history.shared.utils.helpers import sanitize_text
from watch_history.shared.utils.logger import logger
from watch_history.shared.utils.types import ErrorType
from watch_history.timestamps.service import TimestampResolver

WATCH_HREF_RE = re.compile(r"youtube\.com/(?:watch|shorts/)")
CHANNEL_HREF_RE = re.compile(r"youtube\.com/(?:channel/|@|c/|user/)")
OUTER_CELL_SELECTOR = "div.outer-cell.mdl-cell.mdl-cell--12-col.mdl-shadow--2dp"
CAPTION_CLASS = "mdl-typography--caption"


class EntryExtractor:
    """
    Extracts raw entries from a chunk of markup and normalizes them into records.

    Entries are located with an ordered cascade of strategies; the first one
    that finds anything wins for the chunk. With the markup parser disabled
    the chunk is read by text patterns alone.
    """

    def __init__(
        self,
        resolver: Optional[TimestampResolver] = None,
        normalizer: Optional[RecordNormalizer] = None,
        use_markup_parser: bool = True,
    ):
        self.resolver = resolver or TimestampResolver()
        self.normalizer = normalizer or RecordNormalizer()
        self.use_markup_parser = use_markup_parser
        self.strategies: List[Callable[[BeautifulSoup], List[Tag]]] = [
            self.find_content_cells,
            self.find_outer_cells,
            self.find_link_containers,
        ]

    def extract_records(self, chunk: str) -> List[WatchRecord]:
        """
        Extract and normalize every entry in a chunk.

        Args:
            chunk: A slice of the document

        Returns:
            List of WatchRecord objects in document order
        """
        records = []
        for entry in self.extract_entries(chunk):
            record = self.normalizer.normalize(entry)
            if record is not None:
                records.append(record)
        return records

    def extract_entries(self, chunk: str) -> List[RawEntry]:
        """
        Extract the raw entries of a chunk, ads and empty entries removed.

        Args:
            chunk: A slice of the document

        Returns:
            List of RawEntry objects in document order
        """
        if not chunk:
            return []
        if not self.use_markup_parser:
            return extract_entries_by_pattern(chunk, self.resolver)

        soup = self.make_soup(chunk)
        nodes: List[Tag] = []
        for strategy in self.strategies:
            nodes = strategy(soup)
            if nodes:
                break

        entries = []
        for node in nodes:
            try:
                entry = self.parse_entry(node)
            except Exception as e:
                logger.warning(f"Skipping entry that could not be parsed: {e}")
                continue
            if entry is None:
                continue
            if entry.is_ad:
                logger.debug("Skipping advertisement entry")
                continue
            if not entry.has_required_fields():
                continue
            entries.append(entry)
        return entries

    def make_soup(self, chunk: str) -> BeautifulSoup:
        try:
            return BeautifulSoup(chunk, "html.parser")
        except Exception as e:
            raise ExtractionError(
                message=f"An exception making soup: {e}",
                error_type=ErrorType.SOUP_ERROR,
            )

    @staticmethod
    def find_content_cells(soup: BeautifulSoup) -> List[Tag]:
        return soup.find_all("div", class_="content-cell")

    @staticmethod
    def find_outer_cells(soup: BeautifulSoup) -> List[Tag]:
        return soup.select(OUTER_CELL_SELECTOR)

    @staticmethod
    def find_link_containers(soup: BeautifulSoup) -> List[Tag]:
        """Nearest enclosing div of every watch link, each container once."""
        containers = []
        seen = set()
        for link in soup.find_all("a", href=WATCH_HREF_RE):
            container = link.find_parent("div") or link.parent or link
            if id(container) in seen:
                continue
            seen.add(id(container))
            containers.append(container)
        return containers

    def parse_entry(self, node: Tag) -> Optional[RawEntry]:
        """
        Read one entry.

        Args:
            node: The element found by one of the strategies

        Returns:
            RawEntry, or None when the element has no watch link and no digits
            (so it cannot hold a timestamp either)
        """
        classes = node.get("class") or []
        if "content-cell" in classes:
            main = node
        else:
            main = node.find("div", class_="content-cell") or node
        if "outer-cell" in classes:
            scope = node
        else:
            scope = node.find_parent("div", class_="outer-cell") or node

        text = sanitize_text(main.get_text(" "))
        scope_text = text if scope is main else sanitize_text(scope.get_text(" "))
        if any(marker in scope_text for marker in base_configs["ad_markers"]):
            return RawEntry(is_ad=True)

        link = main.find("a", href=WATCH_HREF_RE)
        if link is None and not any(char.isdigit() for char in text):
            return None

        entry = RawEntry()
        if link is not None:
            url = link.get("href")
            entry.video = VideoRef(
                video_id=extract_video_id(url),
                title=self.get_link_title(link),
                url=url,
            )

        channel_link = main.find("a", href=CHANNEL_HREF_RE)
        if channel_link is not None:
            channel_url = channel_link.get("href")
            entry.channel = ChannelRef(
                channel_id=extract_channel_id(channel_url),
                title=sanitize_text(channel_link.get_text()) or None,
                url=channel_url,
            )

        result = self.resolver.resolve(text, str(main))
        entry.timestamp_result = result
        entry.raw_timestamp = result.raw_timestamp
        entry.product = self.detect_product(scope, text)
        return entry

    def get_link_title(self, link: Tag) -> Optional[str]:
        """
        Title of a watch link.

        Exports sometimes render the bare URL as the link text and put the
        title right after the link; in that case the text up to the next
        line break or link is used instead.
        """
        title = sanitize_text(link.get_text())
        if title and not title.startswith("http"):
            return title

        parts = []
        for sibling in link.next_siblings:
            if isinstance(sibling, Tag):
                if sibling.name in ("br", "a"):
                    break
                parts.append(sibling.get_text(" "))
            elif isinstance(sibling, NavigableString):
                parts.append(str(sibling))
        recovered = sanitize_text(" ".join(parts))
        if recovered and "youtube.com" not in recovered and not recovered.startswith("http"):
            return recovered
        return title or None

    @staticmethod
    def detect_product(scope: Tag, text: str) -> Product:
        caption = scope.find(class_=CAPTION_CLASS)
        caption_text = caption.get_text(" ") if caption is not None else ""
        if (
            base_configs["music_caption_marker"] in caption_text
            or base_configs["music_text_marker"] in text
        ):
            return Product.YOUTUBE_MUSIC
        return Product.YOUTUBE
