"""
cache.py — Disk-backed transcript cache.

This is the heart of yt-video-tools.  A transcript for a given
(video, language) pair is fetched from YouTube at most once per cache
directory and then served from a JSON file:

    <cache_dir>/<video_id>_<language>.json

Two tiers:
    1. An in-memory index {CacheKey: Path}.  Purely an accelerator: it can
       be cleared at any time and is rebuilt lazily (or by a directory scan).
    2. The JSON files on disk.  These are the source of truth; a fresh
       process serves cached transcripts from disk alone.

Entries are never updated or evicted.  Captions for a fixed video and
language do not change upstream, so two callers racing on the same cold
key may both fetch and both write the same file without harm.
"""

from __future__ import annotations

import contextlib
import json
import logging
import re
from pathlib import Path
from typing import NamedTuple

from yt_video_tools.captions import fetch_track_xml, locate_caption_tracks, select_track
from yt_video_tools.errors import CacheError, EmptyTranscriptError, InvalidVideoIdError
from yt_video_tools.innertube import InnerTubeClient
from yt_video_tools.models import TranscriptSegment
from yt_video_tools.timedtext import parse_timed_text

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Relative to the working directory unless configured otherwise.
DEFAULT_CACHE_DIR = "transcripts"

DEFAULT_LANGUAGE = "en"

# A bare video ID is exactly 11 characters from the base64url alphabet.
_BARE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")

# URL shapes we know how to pull a video ID out of:
#   - https://www.youtube.com/watch?v=VIDEO_ID (v= anywhere in the query)
#   - https://youtu.be/VIDEO_ID
#   - https://www.youtube.com/embed/VIDEO_ID, /shorts/, /live/, /v/, /e/
# Each pattern captures the 11-character video ID in group "id".
_URL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?:https?://)?(?:www\.|m\.|music\.)?youtube\.com/watch\?(?:.*&)?v=(?P<id>[A-Za-z0-9_-]{11})"),
    re.compile(r"(?:https?://)?youtu\.be/(?P<id>[A-Za-z0-9_-]{11})"),
    re.compile(
        r"(?:https?://)?(?:www\.|m\.)?youtube(?:-nocookie)?\.com/"
        r"(?:embed|shorts|live|v|e)/(?P<id>[A-Za-z0-9_-]{11})"
    ),
]

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_-]")

# <11-char id>_<sanitized language>.json
_CACHE_FILE_PATTERN = re.compile(r"^(?P<id>[A-Za-z0-9_-]{11})_(?P<lang>[A-Za-z0-9_-]+)\.json$")


# ---------------------------------------------------------------------------
# URL / ID parsing
# ---------------------------------------------------------------------------

def parse_video_id(url_or_id: str) -> str:
    """
    Extract a YouTube video ID from a URL string, or validate a raw 11-char ID.

    Args:
        url_or_id: A YouTube URL or a raw video ID.

    Returns:
        The 11-character video ID.

    Raises:
        InvalidVideoIdError: If the string matches no known format.
    """
    candidate = url_or_id.strip()

    if _BARE_ID_PATTERN.match(candidate):
        return candidate

    for pattern in _URL_PATTERNS:
        match = pattern.search(candidate)
        if match:
            return match.group("id")

    raise InvalidVideoIdError(url_or_id)


# ---------------------------------------------------------------------------
# Cache keys
# ---------------------------------------------------------------------------

class CacheKey(NamedTuple):
    """
    Identifies one cache entry.

    `language` is stored already sanitized for the filesystem, so two
    language tags that sanitize to the same string share one entry, exactly
    as they share one file on disk.
    """
    video_id: str
    language: str

    @classmethod
    def of(cls, video_id: str, language: str) -> CacheKey:
        return cls(video_id, _UNSAFE_KEY_CHARS.sub("_", language))

    @property
    def filename(self) -> str:
        return f"{self.video_id}_{self.language}.json"


# ---------------------------------------------------------------------------
# The cache
# ---------------------------------------------------------------------------

class TranscriptCache:
    """
    Fetches transcripts through a two-tier (memory index + JSON file) cache.

    Args:
        innertube: Caller-owned InnerTube client used on cache misses.  Its
                   session also downloads the timed-text XML.
        cache_dir: Where transcript files live.  Created if missing.

    Example:
        with requests.Session() as session:
            cache = TranscriptCache(InnerTubeClient(session), "transcripts")
            segments = cache.fetch_transcript("https://youtu.be/dQw4w9WgXcQ")
    """

    def __init__(
        self,
        innertube: InnerTubeClient,
        cache_dir: str | Path | None = DEFAULT_CACHE_DIR,
    ) -> None:
        self.innertube = innertube
        self._index: dict[CacheKey, Path] = {}
        self.cache_dir = Path(cache_dir or DEFAULT_CACHE_DIR)
        self.set_cache_dir(self.cache_dir)

    # -- administration ------------------------------------------------------

    def set_cache_dir(self, cache_dir: str | Path | None = None) -> Path:
        """
        Point the cache at `cache_dir` (default "transcripts") and create it.

        Safe to call repeatedly.  Switching to a different directory drops
        the memory index, since its paths belong to the old directory.

        Raises:
            CacheError: The directory could not be created.
        """
        new_dir = Path(cache_dir or DEFAULT_CACHE_DIR)
        if new_dir != self.cache_dir:
            self._index.clear()
        self.cache_dir = new_dir
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheError(f"Cannot create cache directory {self.cache_dir}: {exc}") from exc
        return self.cache_dir

    def clear_index(self) -> None:
        """Forget the memory index.  Files on disk are left alone."""
        self._index.clear()

    def index_size(self) -> int:
        """Number of entries currently held in the memory index."""
        return len(self._index)

    def rebuild_index(self) -> int:
        """
        Repopulate the memory index by scanning the cache directory.

        Returns:
            The number of cache files found.
        """
        if not self.cache_dir.is_dir():
            return 0

        found = 0
        for path in self.cache_dir.iterdir():
            match = _CACHE_FILE_PATTERN.match(path.name)
            if match and path.is_file():
                self._index[CacheKey(match.group("id"), match.group("lang"))] = path
                found += 1
        logger.debug("Indexed %d cached transcripts in %s", found, self.cache_dir)
        return found

    def entries(self) -> list[tuple[CacheKey, Path]]:
        """All indexed entries, sorted by key."""
        return sorted(self._index.items())

    def path_for(self, video_id: str, lang: str = DEFAULT_LANGUAGE) -> Path:
        """Deterministic file path for a key, whether or not it exists yet."""
        return self.cache_dir / CacheKey.of(video_id, lang).filename

    def get_path(self, video_id_or_url: str, lang: str = DEFAULT_LANGUAGE) -> Path | None:
        """
        Return the cache file for a transcript without fetching anything.

        Returns:
            The path if the transcript has been cached, otherwise None.

        Raises:
            InvalidVideoIdError: The input contains no video ID.
        """
        video_id = parse_video_id(video_id_or_url)
        key = CacheKey.of(video_id, lang)

        indexed = self._index.get(key)
        if indexed is not None and indexed.exists():
            return indexed

        path = self.path_for(video_id, lang)
        if path.exists():
            self._index[key] = path
            return path
        return None

    # -- disk I/O ------------------------------------------------------------

    def _read(self, path: Path) -> list[TranscriptSegment] | None:
        # An unreadable or corrupt file counts as a miss; the fetch that
        # follows overwrites it.
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return [TranscriptSegment.from_dict(item) for item in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.debug("Ignoring unreadable cache file %s: %s", path, exc)
            return None

    def _write(self, key: CacheKey, segments: list[TranscriptSegment]) -> Path:
        # Written beside the target and renamed into place, so a failed
        # write never leaves a truncated entry behind.
        path = self.cache_dir / key.filename
        partial = path.with_name(f"{path.name}.partial")
        payload = json.dumps([s.to_dict() for s in segments], indent=2, ensure_ascii=False)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            partial.write_text(payload, encoding="utf-8")
            partial.replace(path)
        except (OSError, UnicodeError) as exc:
            with contextlib.suppress(OSError):
                partial.unlink(missing_ok=True)
            raise CacheError(f"Cannot write transcript cache file {path}: {exc}") from exc
        self._index[key] = path
        return path

    # -- public API ----------------------------------------------------------

    def fetch_transcript(
        self,
        video_id_or_url: str,
        lang: str = DEFAULT_LANGUAGE,
    ) -> list[TranscriptSegment]:
        """
        Return the transcript segments for a video, fetching at most once.

        Lookup order, stopping at the first hit:
            1. memory index -> file on disk
            2. deterministic file path on disk (fresh process)
            3. InnerTube caption tracks -> timed-text XML -> parse -> persist

        Args:
            video_id_or_url: A YouTube URL or raw 11-character video ID.
            lang:            Language code (default "en").  For "en" any
                             regional English track is accepted as fallback.

        Raises:
            InvalidVideoIdError:        No video ID in the input.
            UpstreamHTTPError:          Player or timed-text endpoint non-2xx.
            VideoUnavailableError:      Private, deleted, region-locked video.
            CaptionsDisabledError:      The video has no caption tracks.
            LanguageNotAvailableError:  No track in the requested language.
            EmptyTranscriptError:       The track parsed to zero segments.
            CacheError:                 The result could not be persisted.
        """
        video_id = parse_video_id(video_id_or_url)
        key = CacheKey.of(video_id, lang)

        indexed = self._index.get(key)
        if indexed is not None and indexed.exists():
            segments = self._read(indexed)
            if segments is not None:
                logger.debug("Transcript cache hit (memory) for %s", key.filename)
                return segments

        path = self.cache_dir / key.filename
        if path.exists():
            segments = self._read(path)
            if segments is not None:
                logger.debug("Transcript cache hit (disk) for %s", key.filename)
                self._index[key] = path
                return segments

        logger.debug("Transcript cache miss for %s, fetching", key.filename)
        tracks = locate_caption_tracks(self.innertube, video_id)
        track = select_track(tracks, lang, video_id)
        xml = fetch_track_xml(self.innertube.session, track)

        segments = parse_timed_text(xml)
        if not segments:
            raise EmptyTranscriptError(video_id, lang)

        self._write(key, segments)
        return segments

    def fetch_transcript_text(self, video_id_or_url: str, lang: str = DEFAULT_LANGUAGE) -> str:
        """Fetch the transcript and join the segment texts with single spaces."""
        return " ".join(s.text for s in self.fetch_transcript(video_id_or_url, lang))
