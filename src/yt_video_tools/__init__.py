"""
yt_video_tools — YouTube channel feeds, cached transcripts, trending and search.

Public API:
    ChannelResolver       Resolve a channel ID / handle / URL to a UC... ID.
    fetch_feed()          Latest videos of a channel from the RSS feed.
    parse_feed()          Parse an RSS feed document into VideoRecords.
    InnerTubeClient       Caller-owned client for YouTube's InnerTube API.
    locate_caption_tracks()  Caption tracks available for a video.
    parse_timed_text()    Parse caption XML into TranscriptSegments.
    TranscriptCache       Disk-backed transcript fetcher (one fetch per key).
    parse_video_id()      Parse a YouTube URL or validate a bare video ID.
    DataApiClient         Data API v3 listing, trending and search.

Exception hierarchy (all importable from this package):
    YouTubeToolsError              Base exception for everything raised here.
    ├── InvalidVideoIdError        No video ID in the given string.
    ├── UpstreamHTTPError          Non-2xx from a YouTube endpoint.
    │   ├── FeedFetchError         The RSS feed failed.
    │   ├── ApiForbiddenError      Data API 403 (key or quota).
    │   └── ApiBadRequestError     Data API 400.
    ├── MetadataFetchError         yt-dlp channel lookup failed.
    ├── VideoUnavailableError      Private, deleted or region-locked video.
    ├── CaptionsDisabledError      The video has no caption tracks.
    ├── LanguageNotAvailableError  No track in the requested language.
    ├── EmptyTranscriptError       The track had no text segments.
    ├── CacheError                 Transcript file could not be written.
    └── ConfigurationError         Data API key missing.

Usage:
    import requests
    from yt_video_tools import InnerTubeClient, TranscriptCache

    with requests.Session() as session:
        cache = TranscriptCache(InnerTubeClient(session), "transcripts")
        text = cache.fetch_transcript_text("https://youtu.be/dQw4w9WgXcQ")
"""

from yt_video_tools.cache import CacheKey, TranscriptCache, parse_video_id
from yt_video_tools.captions import locate_caption_tracks, select_track
from yt_video_tools.data_api import DataApiClient
from yt_video_tools.errors import (
    ApiBadRequestError,
    ApiForbiddenError,
    CacheError,
    CaptionsDisabledError,
    ConfigurationError,
    EmptyTranscriptError,
    FeedFetchError,
    InvalidVideoIdError,
    LanguageNotAvailableError,
    MetadataFetchError,
    UpstreamHTTPError,
    VideoUnavailableError,
    YouTubeToolsError,
)
from yt_video_tools.feed import FEED_MAX_ENTRIES, fetch_feed, parse_feed
from yt_video_tools.innertube import InnerTubeClient
from yt_video_tools.models import CaptionTrack, TranscriptSegment, VideoRecord
from yt_video_tools.resolver import ChannelResolver
from yt_video_tools.timedtext import parse_timed_text

__all__ = [
    "CacheKey",
    "TranscriptCache",
    "parse_video_id",
    "locate_caption_tracks",
    "select_track",
    "DataApiClient",
    "FEED_MAX_ENTRIES",
    "fetch_feed",
    "parse_feed",
    "InnerTubeClient",
    "CaptionTrack",
    "TranscriptSegment",
    "VideoRecord",
    "ChannelResolver",
    "parse_timed_text",
    "YouTubeToolsError",
    "InvalidVideoIdError",
    "UpstreamHTTPError",
    "FeedFetchError",
    "ApiForbiddenError",
    "ApiBadRequestError",
    "MetadataFetchError",
    "VideoUnavailableError",
    "CaptionsDisabledError",
    "LanguageNotAvailableError",
    "EmptyTranscriptError",
    "CacheError",
    "ConfigurationError",
]
