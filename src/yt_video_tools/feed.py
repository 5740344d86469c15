"""
feed.py — Latest videos for a channel from YouTube's public RSS feed.

The feed needs no API key and costs no quota, but YouTube caps it at the
15 most recent uploads.  Each <entry> looks like:

    <entry>
      <yt:videoId>...</yt:videoId>
      <title>...</title>
      <published>...</published>
      <author><name>...</name></author>
      <media:group>
        <media:description>...</media:description>
        <media:thumbnail url="..." width="480" height="360"/>
      </media:group>
    </entry>
"""

from __future__ import annotations

import logging

import requests

from yt_video_tools.errors import FeedFetchError
from yt_video_tools.models import VideoRecord
from yt_video_tools.xmltext import (
    decode_entities,
    extract_attr,
    extract_nested_tag,
    extract_tag,
    iter_elements,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

FEED_URL = "https://www.youtube.com/feeds/videos.xml?channel_id={channel_id}"

# Hard upstream limit: the feed never contains more entries than this.
FEED_MAX_ENTRIES = 15


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _text_field(fragment: str | None) -> str:
    return decode_entities(fragment) if fragment else ""


def parse_entry(entry: str) -> VideoRecord | None:
    """
    Build a VideoRecord from the inner XML of one <entry>.

    Returns None when the entry has no <yt:videoId>; every other field is
    optional and defaults to an empty string.
    """
    video_id = extract_tag(entry, "yt:videoId")
    if not video_id:
        return None

    thumbnail = extract_attr(entry, "media:thumbnail", "url")
    return VideoRecord(
        video_id=video_id,
        title=_text_field(extract_tag(entry, "title")),
        description=_text_field(extract_nested_tag(entry, "media:group", "media:description")),
        channel_title=_text_field(extract_nested_tag(entry, "author", "name")),
        published_at=_text_field(extract_tag(entry, "published")),
        thumbnail_url=_text_field(thumbnail),
    )


def parse_feed(xml: str, max_results: int = FEED_MAX_ENTRIES) -> list[VideoRecord]:
    """
    Parse an Atom channel feed into at most `max_results` VideoRecords.

    `max_results` is clamped to FEED_MAX_ENTRIES.  Entries without a video
    ID are skipped rather than failing the whole parse, and scanning stops
    as soon as enough records have been collected.

    Args:
        xml:         The raw feed document.
        max_results: How many records the caller wants.

    Returns:
        Records in feed order (newest first, as YouTube sends them).
    """
    limit = min(max_results, FEED_MAX_ENTRIES)
    results: list[VideoRecord] = []
    if limit <= 0:
        return results

    for _attrs, entry in iter_elements(xml, "entry"):
        record = parse_entry(entry)
        if record is None:
            logger.debug("Skipping feed entry without a video id")
            continue
        results.append(record)
        if len(results) >= limit:
            break

    return results


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

def fetch_feed(
    session: requests.Session,
    channel_id: str,
    max_results: int = FEED_MAX_ENTRIES,
) -> list[VideoRecord]:
    """
    Download and parse the RSS feed for a channel.

    Args:
        session:     Caller-owned HTTP session.
        channel_id:  Canonical channel ID (UC...).
        max_results: Number of videos wanted (clamped to 15).

    Raises:
        FeedFetchError: The feed endpoint answered with a non-2xx status.
    """
    response = session.get(FEED_URL.format(channel_id=channel_id))
    if not response.ok:
        raise FeedFetchError(channel_id, response.status_code, response.reason or "")

    return parse_feed(response.text, max_results)
