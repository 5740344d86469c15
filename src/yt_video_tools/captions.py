"""
captions.py — Find and download the caption tracks of a video.

    locate_caption_tracks()  Ask the InnerTube player which tracks exist.
    select_track()           Pick the track for a requested language.
    fetch_track_xml()        Download one track's timed-text XML.
"""

from __future__ import annotations

import logging

import requests

from yt_video_tools.errors import (
    CaptionsDisabledError,
    LanguageNotAvailableError,
    UpstreamHTTPError,
    VideoUnavailableError,
)
from yt_video_tools.innertube import InnerTubeClient
from yt_video_tools.models import CaptionTrack

logger = logging.getLogger(__name__)

# Playability states that mean "this video will never play for us".
_UNPLAYABLE_STATUSES = frozenset({"UNPLAYABLE", "LOGIN_REQUIRED"})


def _track_name(raw: dict) -> str | None:
    name = raw.get("name") or {}
    if "simpleText" in name:
        return name["simpleText"]
    runs = name.get("runs") or []
    return "".join(run.get("text", "") for run in runs) or None


def _check_playability(data: dict, video_id: str) -> None:
    playability = data.get("playabilityStatus") or {}
    status = playability.get("status")
    if status in _UNPLAYABLE_STATUSES:
        raise VideoUnavailableError(video_id, status)
    if status == "ERROR":
        raise VideoUnavailableError(video_id, status, reason=playability.get("reason"))


def locate_caption_tracks(innertube: InnerTubeClient, video_id: str) -> list[CaptionTrack]:
    """
    Return every caption track the player advertises for `video_id`.

    Args:
        innertube: Caller-owned InnerTube client.
        video_id:  The 11-character video ID.

    Raises:
        UpstreamHTTPError:      The player endpoint returned non-2xx.
        VideoUnavailableError:  The video is private, deleted, region-locked
                                or otherwise reported as unplayable.
        CaptionsDisabledError:  The video plays but has no caption tracks.
    """
    data = innertube.player(video_id)
    _check_playability(data, video_id)

    renderer = (data.get("captions") or {}).get("playerCaptionsTracklistRenderer") or {}
    raw_tracks = renderer.get("captionTracks") or []

    tracks = [
        CaptionTrack(
            base_url=raw["baseUrl"],
            language_code=raw.get("languageCode", ""),
            name=_track_name(raw),
        )
        for raw in raw_tracks
        if raw.get("baseUrl")
    ]
    if not tracks:
        raise CaptionsDisabledError(video_id)

    return tracks


def select_track(tracks: list[CaptionTrack], lang: str, video_id: str = "") -> CaptionTrack:
    """
    Choose the track for `lang`.

    An exact language-code match always wins.  For "en" only, any regional
    English variant ("en-US", "en-GB", ...) is accepted next, in the order
    the player listed them.

    Raises:
        LanguageNotAvailableError: No track matches; lists what is available.
    """
    for track in tracks:
        if track.language_code == lang:
            return track

    if lang == "en":
        for track in tracks:
            if track.language_code.startswith("en"):
                logger.debug("Using %s track for requested language en", track.language_code)
                return track

    raise LanguageNotAvailableError(video_id, lang, [t.language_code for t in tracks])


def fetch_track_xml(session: requests.Session, track: CaptionTrack) -> str:
    """
    Download the timed-text XML for a track.

    Raises:
        UpstreamHTTPError: The timed-text endpoint returned non-2xx.
    """
    response = session.get(track.base_url)
    if not response.ok:
        raise UpstreamHTTPError(
            message=f"Failed to download transcript XML: {response.status_code} {response.reason or ''}".rstrip(),
            status_code=response.status_code,
        )
    return response.text
