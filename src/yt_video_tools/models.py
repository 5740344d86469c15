"""
models.py — Plain data records shared by the feed, listing and transcript code.

All records are frozen dataclasses: once built they are never mutated.
`to_dict()` produces the camelCase keys used on the wire and in the
on-disk transcript cache, so JSON output stays compatible with files
written by earlier versions of the cache.
"""

from __future__ import annotations

from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Video listing records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VideoRecord:
    """
    One video, as returned by the RSS feed or the Data API.

    Both sources map into this same shape, so callers never need to know
    which one produced a record.  Identity is `video_id` alone.

    Attributes:
        video_id:      The 11-character YouTube video identifier.
        title:         Video title (entities already decoded).
        description:   Video description; may be empty.
        channel_title: Human-readable channel name.
        published_at:  ISO-8601 publish timestamp as sent by YouTube.
        thumbnail_url: Best available thumbnail URL; may be empty.
    """
    video_id: str
    title: str
    description: str
    channel_title: str
    published_at: str
    thumbnail_url: str

    def to_dict(self) -> dict:
        return {
            "videoId": self.video_id,
            "title": self.title,
            "description": self.description,
            "channelTitle": self.channel_title,
            "publishedAt": self.published_at,
            "thumbnailUrl": self.thumbnail_url,
        }


# ---------------------------------------------------------------------------
# Transcript records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TranscriptSegment:
    """
    A single timed caption line.

    Attributes:
        text:     Caption text with inline markup stripped.
        offset:   Start time in seconds.
        duration: Display duration in seconds.
    """
    text: str
    offset: float
    duration: float

    def to_dict(self) -> dict:
        return {"text": self.text, "offset": self.offset, "duration": self.duration}

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptSegment:
        return cls(
            text=data["text"],
            offset=float(data["offset"]),
            duration=float(data["duration"]),
        )


@dataclass(frozen=True)
class CaptionTrack:
    """
    A caption track advertised by the InnerTube player endpoint.

    Fetched fresh for every cache miss and never cached itself; only the
    parsed segments of the selected track are persisted.
    """
    base_url: str
    language_code: str
    name: str | None = None
