"""
resolver.py — Turn a loose channel reference into a canonical channel ID.

Accepted inputs:
    UCuAXFkgsw1L7xaCfnd5JJOw                     returned as-is, no network
    https://www.youtube.com/@RickAstleyYT       any youtube.com channel URL
    @RickAstleyYT                               a handle
    RickAstleyYT                                a bare handle

Resolution never raises.  "No such channel" is an ordinary answer and is
reported as None; so is any network or parsing trouble along the way.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

import requests

from yt_video_tools.errors import YouTubeToolsError
from yt_video_tools.innertube import InnerTubeClient
from yt_video_tools.metadata import channel_id_from_metadata, fetch_channel_metadata

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# A raw channel ID: "UC" followed by 22 base64url characters.
CHANNEL_ID_PATTERN = re.compile(r"^UC[a-zA-Z0-9_-]{22}$")

HANDLE_BASE_URL = "https://www.youtube.com/"


def is_channel_id(value: str | None) -> bool:
    return bool(value) and CHANNEL_ID_PATTERN.match(value) is not None


def normalize_channel_url(ref: str) -> str:
    """
    Build a channel URL from a reference.

    URLs pass through untouched, "@handle" is appended to the youtube.com
    base, and anything else is treated as a handle missing its "@".
    Handles cannot contain whitespace, so any is dropped.
    """
    ref = ref.strip()
    if ref.startswith(("http://", "https://")):
        return ref
    handle = "".join(ref.split())
    if not handle.startswith("@"):
        handle = f"@{handle}"
    return f"{HANDLE_BASE_URL}{handle}"


def _browse_id(data) -> str | None:
    if not isinstance(data, dict):
        return None
    endpoint = data.get("endpoint") or {}
    payload = data.get("payload") or {}
    candidates = (
        (endpoint.get("browseEndpoint") or {}).get("browseId"),
        data.get("browseId"),
        payload.get("browseId"),
        (payload.get("browseEndpoint") or {}).get("browseId"),
    )
    for candidate in candidates:
        if is_channel_id(candidate):
            return candidate
    return None


class ChannelResolver:
    """
    Resolve channel references through InnerTube, then yt-dlp.

    Args:
        innertube:        Caller-owned InnerTube client.
        metadata_lookup:  Channel-page metadata fetcher used as fallback;
                          defaults to yt-dlp via fetch_channel_metadata.
    """

    def __init__(
        self,
        innertube: InnerTubeClient,
        metadata_lookup: Callable[[str], dict] = fetch_channel_metadata,
    ) -> None:
        self.innertube = innertube
        self.metadata_lookup = metadata_lookup

    def _via_resolve_url(self, url: str) -> str | None:
        try:
            return _browse_id(self.innertube.resolve_url(url))
        except (requests.RequestException, YouTubeToolsError, ValueError) as exc:
            logger.debug("resolve_url failed for %s: %s", url, exc)
            return None

    def _via_metadata(self, url: str) -> str | None:
        try:
            return channel_id_from_metadata(self.metadata_lookup(url))
        except (requests.RequestException, YouTubeToolsError, ValueError) as exc:
            logger.debug("Channel metadata lookup failed for %s: %s", url, exc)
            return None

    def resolve(self, ref: str) -> str | None:
        """
        Return the canonical channel ID for `ref`, or None if it can't be found.
        """
        ref = ref.strip()
        if not ref:
            return None
        if is_channel_id(ref):
            return ref

        url = normalize_channel_url(ref)
        channel_id = self._via_resolve_url(url) or self._via_metadata(url)
        if channel_id is None:
            logger.debug("No channel found for %r", ref)
        return channel_id
