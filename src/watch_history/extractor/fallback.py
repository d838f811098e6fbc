"""
Pattern-only entry extraction, used when the markup cannot be parsed structurally.
"""

import html
import re
from typing import List, Optional

from watch_history.normalizer.service import extract_channel_id, extract_video_id
from watch_history.shared.schemas.dto import ChannelRef, Product, RawEntry, VideoRef
from watch_history.shared.utils.configs import base_configs, chunk_configs
from watch_history.shared.utils.helpers import markup_to_text
from watch_history.shared.utils.logger import logger
from watch_history.timestamps.service import TimestampResolver

WATCH_LINK_RE = re.compile(
    r'<a[^>]+href="([^"]*youtube\.com/(?:watch\?[^"]*v=[^"&]+|shorts/[^"?&]+)[^"]*)"[^>]*>(.*?)</a>',
    re.IGNORECASE | re.DOTALL,
)
CHANNEL_LINK_RE = re.compile(
    r'<a[^>]+href="([^"]*youtube\.com/(?:channel/|@|c/|user/)[^"]*)"[^>]*>(.*?)</a>',
    re.IGNORECASE | re.DOTALL,
)
CONTAINER_START_RE = re.compile(r'<div[^>]*class="[^"]*\bouter-cell\b', re.IGNORECASE)
TITLE_TAIL_RE = re.compile(r"^([^<\n]+?)(?:<br|<a|$)", re.IGNORECASE)


def extract_entries_by_pattern(
    markup: str,
    resolver: TimestampResolver,
    window: Optional[int] = None,
) -> List[RawEntry]:
    """
    Find entries by their watch links and read their fields from nearby text.

    For each watch link (first occurrence of each URL), the markup after the
    link up to the next watch link, capped at ``window`` characters, is
    searched first for the channel and the timestamp. The markup before the
    link is only searched when it provably belongs to the same entry, i.e.
    it starts at an entry container or there is no earlier watch link.

    Args:
        markup: Document or chunk markup
        resolver: Resolver for the timestamp text
        window: Context size on each side of a link

    Returns:
        List of RawEntry objects in document order, ads removed
    """
    window = window or chunk_configs["context_window"]
    matches = list(WATCH_LINK_RE.finditer(markup))
    seen_urls = set()
    entries = []

    for index, match in enumerate(matches):
        url = html.unescape(match.group(1))
        if url in seen_urls:
            continue
        seen_urls.add(url)

        previous_end = matches[index - 1].end() if index > 0 else 0
        next_start = matches[index + 1].start() if index + 1 < len(matches) else len(markup)

        after = markup[match.end():min(next_start, match.end() + window)]
        next_container = CONTAINER_START_RE.search(after)
        if next_container:
            after = after[:next_container.start()]

        before = markup[max(previous_end, match.start() - window):match.start()]
        own_containers = list(CONTAINER_START_RE.finditer(before))
        if own_containers:
            before = before[own_containers[-1].start():]
        before_is_own = bool(own_containers) or index == 0

        entry = build_entry(url, match.group(2), after, before, before_is_own, resolver)
        if entry is None:
            continue
        entries.append(entry)

    if matches:
        logger.debug(f"Pattern extraction found {len(entries)} entries")
    return entries


def build_entry(
    url: str,
    anchor_markup: str,
    after: str,
    before: str,
    before_is_own: bool,
    resolver: TimestampResolver,
) -> Optional[RawEntry]:
    after_text = markup_to_text(after)
    before_text = markup_to_text(before)
    context_text = f"{before_text} {after_text}"

    if any(marker in context_text for marker in base_configs["ad_markers"]):
        logger.debug(f"Skipping advertisement entry: {url}")
        return None

    title = markup_to_text(anchor_markup)
    if not title or title.startswith("http"):
        tail = TITLE_TAIL_RE.match(after.lstrip())
        recovered = markup_to_text(tail.group(1)) if tail else ""
        if recovered and "youtube.com" not in recovered:
            title = recovered

    channel_match = CHANNEL_LINK_RE.search(after)
    if channel_match is None and before_is_own:
        channel_match = CHANNEL_LINK_RE.search(before)

    result = resolver.resolve(after_text)
    if result.raw_timestamp is None and before_is_own and before_text:
        result = resolver.resolve(before_text)

    music = (
        base_configs["music_caption_marker"].lower() in context_text.lower()
        or base_configs["music_text_marker"].lower() in context_text.lower()
    )

    channel = None
    if channel_match:
        channel_url = html.unescape(channel_match.group(1))
        channel = ChannelRef(
            channel_id=extract_channel_id(channel_url),
            title=markup_to_text(channel_match.group(2)) or None,
            url=channel_url,
        )

    return RawEntry(
        video=VideoRef(video_id=extract_video_id(url), title=title or None, url=url),
        channel=channel,
        raw_timestamp=result.raw_timestamp,
        product=Product.YOUTUBE_MUSIC if music else Product.YOUTUBE,
        timestamp_result=result,
    )
