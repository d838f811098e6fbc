"""
Shared fixtures for building exported watch-history markup.
"""

import pytest

OUTER_CELL = '<div class="outer-cell mdl-cell mdl-cell--12-col mdl-shadow--2dp">'
EXPORT_TIMESTAMP = "Aug 11, 2025, 10:30:00 PM CDT"


def build_entry(
    video_id="dQw4w9WgXcQ",
    title="Test Video",
    channel="Test Channel",
    channel_url="https://www.youtube.com/channel/UC38IQsAvIsxxjztdMZQtwHA",
    timestamp=EXPORT_TIMESTAMP,
    product="YouTube",
    action="Watched",
    details="",
):
    """Markup of one entry, laid out the way the export lays it out."""
    channel_html = f'<a href="{channel_url}">{channel}</a><br>' if channel else ""
    video_html = (
        f'<a href="https://www.youtube.com/watch?v={video_id}">{title}</a><br>'
        if video_id
        else ""
    )
    return (
        f'{OUTER_CELL}<div class="mdl-grid">'
        '<div class="header-cell mdl-cell mdl-cell--12-col">'
        f'<p class="mdl-typography--title">{product}<br></p></div>'
        '<div class="content-cell mdl-cell mdl-cell--6-col mdl-typography--body-1">'
        f"{action}\u00a0{video_html}{channel_html}{timestamp}<br></div>"
        '<div class="content-cell mdl-cell mdl-cell--12-col mdl-typography--caption">'
        f"<b>Products:</b><br>\u2003{product}<br>{details}</div>"
        "</div></div>"
    )


def build_ad_entry(video_id="adVideo0001"):
    return build_entry(
        video_id=video_id,
        title="Sponsored Video",
        channel=None,
        details="<b>Details:</b><br>\u2003Viewed Ads On YouTube<br>",
    )


def build_document(entries):
    return (
        '<html><head><meta charset="utf-8"><title>Watch history</title></head>'
        '<body><div class="mdl-grid">' + "".join(entries) + "</div></body></html>"
    )


@pytest.fixture
def entry_html():
    return build_entry


@pytest.fixture
def ad_entry_html():
    return build_ad_entry


@pytest.fixture
def history_document():
    return build_document


@pytest.fixture
def sample_document():
    """Three regular entries, one music entry and one advertisement."""
    return build_document(
        [
            build_entry(video_id="video000001", title="First Video"),
            build_ad_entry(),
            build_entry(
                video_id="video000002",
                title="Second Video",
                channel="Other Channel",
                channel_url="https://www.youtube.com/@otherchannel",
                timestamp="Aug 10, 2025, 9:15:42 AM CDT",
            ),
            build_entry(
                video_id="music000001",
                title="Some Song",
                channel="Some Artist",
                channel_url="https://www.youtube.com/channel/UCmusicartist",
                timestamp="Jan 3, 2025, 11:05:10 PM CST",
                product="YouTube Music",
                action="Listened to",
            ),
            build_entry(
                video_id="video000003",
                title="Third Video",
                timestamp="sometime last summer",
            ),
        ]
    )
