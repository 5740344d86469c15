"""
data_api.py — Minimal YouTube Data API v3 client (search / videos).

Unlike the feed and InnerTube paths this one needs an API key and spends
quota.  Only the first page of results is ever requested.

Result items come in two shapes that we fold into one VideoRecord:

    search.list   {"id": {"kind": "youtube#video", "videoId": "..."}, "snippet": {...}}
    videos.list   {"id": "...", "snippet": {...}}
"""

from __future__ import annotations

import logging

import requests

from yt_video_tools.errors import (
    ApiBadRequestError,
    ApiForbiddenError,
    ConfigurationError,
    UpstreamHTTPError,
)
from yt_video_tools.models import VideoRecord

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DATA_API_BASE_URL = "https://www.googleapis.com/youtube/v3"

SEARCH_ORDERS = ("relevance", "date", "viewCount")

# Largest first, as the API names them.
_THUMBNAIL_PREFERENCE = ("high", "medium", "default")


# ---------------------------------------------------------------------------
# Item mapping
# ---------------------------------------------------------------------------

def best_thumbnail(thumbnails: dict | None) -> str:
    """URL of the highest-resolution thumbnail present, or "" if none."""
    for size in _THUMBNAIL_PREFERENCE:
        url = ((thumbnails or {}).get(size) or {}).get("url")
        if url:
            return url
    return ""


def video_record_from_item(item: dict) -> VideoRecord:
    """Map a search.list or videos.list item into a VideoRecord."""
    raw_id = item.get("id")
    video_id = raw_id.get("videoId", "") if isinstance(raw_id, dict) else (raw_id or "")
    snippet = item.get("snippet") or {}
    return VideoRecord(
        video_id=video_id,
        title=snippet.get("title", ""),
        description=snippet.get("description", ""),
        channel_title=snippet.get("channelTitle", ""),
        published_at=snippet.get("publishedAt", ""),
        thumbnail_url=best_thumbnail(snippet.get("thumbnails")),
    )


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class DataApiClient:
    """
    Caller-owned Data API client.

    Args:
        session:  HTTP session created (and closed) by the caller.
        api_key:  YouTube Data API v3 key.

    Raises:
        ConfigurationError: No API key was given.
    """

    def __init__(
        self,
        session: requests.Session,
        api_key: str,
        base_url: str = DATA_API_BASE_URL,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                "A YouTube Data API key is required (set YOUTUBE_API_KEY or pass --api-key)."
            )
        self.session = session
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    def _get(self, path: str, params: dict) -> dict:
        query = {key: value for key, value in params.items() if value is not None}
        query["key"] = self.api_key

        response = self.session.get(f"{self.base_url}/{path}", params=query)
        if not response.ok:
            body = response.text or ""
            if response.status_code == 403:
                raise ApiForbiddenError(body)
            if response.status_code == 400:
                raise ApiBadRequestError(body)
            raise UpstreamHTTPError(
                message=f"YouTube API error {response.status_code} {response.reason or ''}: {body}",
                status_code=response.status_code,
                body=body,
            )
        return response.json()

    def _items(self, path: str, params: dict) -> list[dict]:
        return self._get(path, params).get("items") or []

    def list_by_channel(self, channel_id: str, max_results: int = 10) -> list[VideoRecord]:
        """Most recent uploads of a channel, newest first."""
        items = self._items("search", {
            "part": "snippet",
            "type": "video",
            "channelId": channel_id,
            "order": "date",
            "maxResults": max_results,
        })
        return [video_record_from_item(item) for item in items][:max_results]

    def list_trending(
        self,
        region_code: str = "US",
        max_results: int = 10,
        category_id: str | None = None,
    ) -> list[VideoRecord]:
        """Most popular videos for a region, optionally within one category."""
        items = self._items("videos", {
            "part": "snippet",
            "chart": "mostPopular",
            "regionCode": region_code,
            "maxResults": max_results,
            "videoCategoryId": category_id or None,
        })
        return [video_record_from_item(item) for item in items]

    def search(
        self,
        query: str,
        max_results: int = 10,
        order: str = "relevance",
    ) -> list[VideoRecord]:
        """Free-text video search.  `order` is relevance, date or viewCount."""
        if order not in SEARCH_ORDERS:
            raise ValueError(f"Unknown order {order!r}; expected one of {', '.join(SEARCH_ORDERS)}")
        items = self._items("search", {
            "part": "snippet",
            "type": "video",
            "q": query,
            "order": order,
            "maxResults": max_results,
        })
        return [video_record_from_item(item) for item in items][:max_results]

    def find_channel_id(self, query: str) -> str | None:
        """Channel ID of the best channel match for a name, or None."""
        items = self._items("search", {
            "part": "snippet",
            "type": "channel",
            "q": query,
            "maxResults": 1,
        })
        if not items:
            return None
        raw_id = items[0].get("id")
        return raw_id.get("channelId") if isinstance(raw_id, dict) else None
