"""
errors.py — Custom exception hierarchy for yt-video-tools.

Every exception carries an `http_status` attribute so the FastAPI error
handler can translate engine errors directly into the correct HTTP
response code without a separate mapping table.

Hierarchy:
    YouTubeToolsError (base, 500)
    ├── InvalidVideoIdError (400)
    ├── UpstreamHTTPError (502)
    │   ├── FeedFetchError (502)
    │   ├── ApiForbiddenError (403)
    │   └── ApiBadRequestError (400)
    ├── MetadataFetchError (502)
    ├── VideoUnavailableError (404)
    ├── CaptionsDisabledError (404)
    ├── LanguageNotAvailableError (404)
    ├── EmptyTranscriptError (404)
    ├── CacheError (500)
    └── ConfigurationError (500)

A channel that cannot be resolved is NOT an error: the resolver returns None.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class YouTubeToolsError(Exception):
    """
    Root exception for everything the engine raises.

    Attributes:
        message:     Human-readable description of what went wrong.
        http_status: Suggested HTTP status code for the API layer.
    """

    def __init__(self, message: str, http_status: int = 500) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------

class InvalidVideoIdError(YouTubeToolsError):
    """
    Raised when no 11-character video ID can be extracted from the input.

    Raised before any network call or cache lookup.  Maps to HTTP 400.
    """

    def __init__(self, value: str) -> None:
        super().__init__(
            message=f'Cannot extract a YouTube video ID from "{value}"',
            http_status=400,
        )
        self.value = value


# ---------------------------------------------------------------------------
# Upstream HTTP failures
# ---------------------------------------------------------------------------

class UpstreamHTTPError(YouTubeToolsError):
    """
    Raised when a YouTube endpoint answers with a non-2xx status.

    Covers the feed, InnerTube player, timed-text and Data API endpoints.
    Never retried.  Maps to HTTP 502 unless a subclass says otherwise.

    Attributes:
        status_code: The upstream HTTP status.
        body:        Response body text, when it was worth keeping.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        body: str = "",
        http_status: int = 502,
    ) -> None:
        super().__init__(message=message, http_status=http_status)
        self.status_code = status_code
        self.body = body


class FeedFetchError(UpstreamHTTPError):
    """Raised when the public RSS feed for a channel returns non-2xx."""

    def __init__(self, channel_id: str, status_code: int, reason: str = "") -> None:
        status = f"{status_code} {reason}".strip()
        super().__init__(
            message=f'YouTube RSS feed returned {status} for channel "{channel_id}"',
            status_code=status_code,
        )
        self.channel_id = channel_id


class ApiForbiddenError(UpstreamHTTPError):
    """
    Raised on a Data API 403.

    Almost always a bad key or an exhausted quota.  Maps to HTTP 403.
    """

    def __init__(self, body: str = "") -> None:
        super().__init__(
            message=f"YouTube API forbidden (403). Check your API key and quota. {body}".rstrip(),
            status_code=403,
            body=body,
            http_status=403,
        )


class ApiBadRequestError(UpstreamHTTPError):
    """Raised on a Data API 400 (malformed parameters).  Maps to HTTP 400."""

    def __init__(self, body: str = "") -> None:
        super().__init__(
            message=f"YouTube API bad request (400): {body}",
            status_code=400,
            body=body,
            http_status=400,
        )


class MetadataFetchError(YouTubeToolsError):
    """
    Raised when yt-dlp fails to retrieve channel metadata from YouTube.

    The channel resolver catches this and reports a miss (None); it only
    reaches callers who use the metadata lookup directly.  Maps to HTTP 502.
    """

    def __init__(self, ref: str, reason: str = "") -> None:
        detail = f": {reason}" if reason else ""
        super().__init__(
            message=f"Failed to fetch metadata for {ref}{detail}",
            http_status=502,
        )
        self.ref = ref


# ---------------------------------------------------------------------------
# Domain unavailability
# ---------------------------------------------------------------------------

class VideoUnavailableError(YouTubeToolsError):
    """
    Raised when the player endpoint reports the video as unplayable.

    `status` is the upstream playability status (UNPLAYABLE, LOGIN_REQUIRED
    or ERROR).  For ERROR the upstream reason string is included when the
    player supplied one.  Maps to HTTP 404.
    """

    def __init__(self, video_id: str, status: str, reason: str | None = None) -> None:
        if status == "ERROR":
            message = f'Video "{video_id}" returned an error: {reason or "unknown"}'
        else:
            message = (
                f'Video "{video_id}" is unavailable ({status}). '
                "It may be private, deleted, or region-locked."
            )
        super().__init__(message=message, http_status=404)
        self.video_id = video_id
        self.status = status
        self.reason = reason


class CaptionsDisabledError(YouTubeToolsError):
    """
    Raised when a playable video exposes no caption tracks at all.

    Distinct from VideoUnavailableError: the video plays fine, the creator
    just has no captions (and YouTube generated none).  Maps to HTTP 404.
    """

    def __init__(self, video_id: str) -> None:
        super().__init__(
            message=f'No caption tracks found for video "{video_id}". Transcripts may be disabled.',
            http_status=404,
        )
        self.video_id = video_id


class LanguageNotAvailableError(YouTubeToolsError):
    """
    Raised when the video has caption tracks, but none in the requested language.

    The message lists every language code that *is* available so the caller
    can retry with one of them.  Maps to HTTP 404.
    """

    def __init__(self, video_id: str, requested: str, available: list[str]) -> None:
        super().__init__(
            message=(
                f'Transcript not available in language "{requested}" for video "{video_id}". '
                f"Available languages: {', '.join(available)}"
            ),
            http_status=404,
        )
        self.video_id = video_id
        self.requested = requested
        self.available = available


class EmptyTranscriptError(YouTubeToolsError):
    """Raised when a caption track downloads fine but parses to zero segments."""

    def __init__(self, video_id: str, language: str) -> None:
        super().__init__(
            message=(
                f'Transcript for video "{video_id}" (lang: {language}) '
                "was retrieved but contained no text segments."
            ),
            http_status=404,
        )
        self.video_id = video_id
        self.language = language


# ---------------------------------------------------------------------------
# Local failures
# ---------------------------------------------------------------------------

class CacheError(YouTubeToolsError):
    """
    Raised when a transcript cannot be written to the cache directory.

    Covers permission errors, a full disk, or a cache path that is a file.
    Maps to HTTP 500 because the request was valid but local storage broke.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message=message, http_status=500)


class ConfigurationError(YouTubeToolsError):
    """Raised when a Data API call is attempted without an API key."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, http_status=500)
