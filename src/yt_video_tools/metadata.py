"""
metadata.py — Fetch channel metadata from YouTube using yt-dlp.

The channel resolver's first attempt is the InnerTube resolve_url endpoint.
When that yields nothing usable, this module is the fallback: yt-dlp
scrapes the channel page in metadata-only mode and we pick the channel ID
out of whichever field the current page layout happens to fill.

The main entry points are fetch_channel_metadata(), which returns yt-dlp's
raw info_dict, and channel_id_from_metadata(), which digs the ID out of it.
"""

from __future__ import annotations

import re

import yt_dlp

from yt_video_tools.errors import MetadataFetchError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_CHANNEL_ID_PATTERN = re.compile(r"UC[A-Za-z0-9_-]{22}")

# Fields that hold the bare channel ID, in priority order.  Which of them
# is populated depends on the extractor and the page shape yt-dlp saw.
_ID_FIELDS = ("channel_id", "id", "uploader_id")

# Fields that hold a URL which may embed the channel ID.
_URL_FIELDS = ("channel_url", "uploader_url", "webpage_url")


# ---------------------------------------------------------------------------
# Metadata fetching
# ---------------------------------------------------------------------------

def fetch_channel_metadata(channel_url: str) -> dict:
    """
    Fetch metadata for a channel page without downloading any videos.

    Uses yt-dlp with flat extraction and a one-entry playlist window, so
    only the channel page itself is requested.

    Args:
        channel_url: A channel, handle or custom URL on youtube.com.

    Returns:
        yt-dlp's info_dict for the page.

    Raises:
        MetadataFetchError: yt-dlp could not extract the page (unknown
            channel, network error, rate limiting, ...).
    """
    ydl_opts = {
        "skip_download": True,
        "quiet": True,
        "no_warnings": True,
        "extract_flat": True,
        "playlistend": 1,
    }

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(channel_url, download=False)
    except yt_dlp.utils.DownloadError as exc:
        raise MetadataFetchError(channel_url, reason=str(exc)) from exc

    if info is None:
        raise MetadataFetchError(channel_url, reason="yt-dlp returned no info")

    return info


def channel_id_from_metadata(info: dict) -> str | None:
    """
    Return the first canonical channel ID found in a yt-dlp info_dict.

    Bare-ID fields are tried first, then URL fields (searched for an
    embedded UC... ID).  Values that don't have the canonical shape are
    ignored.
    """
    for field in _ID_FIELDS:
        value = info.get(field)
        if isinstance(value, str) and _CHANNEL_ID_PATTERN.fullmatch(value):
            return value

    for field in _URL_FIELDS:
        value = info.get(field)
        if isinstance(value, str):
            match = _CHANNEL_ID_PATTERN.search(value)
            if match:
                return match.group(0)

    return None
