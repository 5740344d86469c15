"""
test_cache.py — Tests for video-ID parsing and the two-tier transcript cache.

Every test gets its own cache directory under pytest's tmp_path.  The
network is a MagicMock session: session.post answers the InnerTube player
call and session.get answers the timed-text download, so we can count
exactly how many fetches happened.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from yt_video_tools.cache import CacheKey, TranscriptCache, parse_video_id
from yt_video_tools.errors import (
    CacheError,
    CaptionsDisabledError,
    EmptyTranscriptError,
    InvalidVideoIdError,
    LanguageNotAvailableError,
    UpstreamHTTPError,
)
from yt_video_tools.innertube import InnerTubeClient
from yt_video_tools.models import TranscriptSegment

VIDEO_ID = "dQw4w9WgXcQ"

_CAPTION_XML = """<?xml version="1.0" encoding="utf-8" ?>
<timedtext format="3"><body>
<p t="0" d="1500">Never gonna give you up</p>
<p t="1500" d="2000">Never gonna let you down</p>
</body></timedtext>"""

_EXPECTED = [
    TranscriptSegment("Never gonna give you up", 0.0, 1.5),
    TranscriptSegment("Never gonna let you down", 1.5, 2.0),
]


# ---------------------------------------------------------------------------
# Helpers — a fake YouTube behind a MagicMock session
# ---------------------------------------------------------------------------

def _response(status_code: int = 200, json_data=None, text: str = "", reason: str = "OK") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.text = text
    response.json.return_value = json_data
    return response


def _fake_session(
    codes: tuple[str, ...] = ("en",),
    xml: str = _CAPTION_XML,
    xml_status: int = 200,
) -> MagicMock:
    tracks = [
        {"baseUrl": f"https://www.youtube.com/api/timedtext?lang={code}", "languageCode": code}
        for code in codes
    ]
    session = MagicMock()
    session.post.return_value = _response(json_data={
        "playabilityStatus": {"status": "OK"},
        "captions": {"playerCaptionsTracklistRenderer": {"captionTracks": tracks}},
    })
    session.get.return_value = _response(status_code=xml_status, text=xml, reason="Server Error")
    return session


def _cache(tmp_path: Path, session: MagicMock | None = None) -> TranscriptCache:
    return TranscriptCache(InnerTubeClient(session or _fake_session()), tmp_path / "transcripts")


def _network_calls(session: MagicMock) -> int:
    return session.post.call_count + session.get.call_count


# ---------------------------------------------------------------------------
# parse_video_id
# ---------------------------------------------------------------------------

class TestParseVideoId:
    """URL formats and bare IDs."""

    @pytest.mark.parametrize("value", [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PLrAXtmErZgOeiKm4sgNOknGvNjby9efdf&t=42",
        "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ?si=abc",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "https://www.youtube.com/shorts/dQw4w9WgXcQ",
        "https://www.youtube.com/live/dQw4w9WgXcQ",
        "https://m.youtube.com/watch?v=dQw4w9WgXcQ",
        "http://youtube.com/watch?v=dQw4w9WgXcQ",
        "youtu.be/dQw4w9WgXcQ",
        "dQw4w9WgXcQ",
        "  dQw4w9WgXcQ  ",
    ])
    def test_extracts_id(self, value: str) -> None:
        assert parse_video_id(value) == VIDEO_ID

    def test_id_with_hyphens_and_underscores(self) -> None:
        assert parse_video_id("Ab_Cd-Ef_12") == "Ab_Cd-Ef_12"

    @pytest.mark.parametrize("value", ["", "not-a-youtube-url", "dQw4w9WgXc", "https://vimeo.com/12345678901"])
    def test_invalid_input_raises(self, value: str) -> None:
        with pytest.raises(InvalidVideoIdError):
            parse_video_id(value)


# ---------------------------------------------------------------------------
# Cache keys
# ---------------------------------------------------------------------------

class TestCacheKey:

    def test_filename(self) -> None:
        assert CacheKey.of(VIDEO_ID, "en").filename == "dQw4w9WgXcQ_en.json"

    def test_language_sanitized(self) -> None:
        assert CacheKey.of(VIDEO_ID, "pt.BR/x").filename == "dQw4w9WgXcQ_pt_BR_x.json"

    def test_safe_language_unchanged(self) -> None:
        assert CacheKey.of(VIDEO_ID, "zh-Hans_1").language == "zh-Hans_1"


# ---------------------------------------------------------------------------
# fetch_transcript — the full miss path
# ---------------------------------------------------------------------------

class TestFetchOnMiss:

    def test_returns_parsed_segments(self, tmp_path) -> None:
        assert _cache(tmp_path).fetch_transcript(VIDEO_ID) == _EXPECTED

    def test_writes_pretty_printed_json(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        cache.fetch_transcript(VIDEO_ID)

        path = tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json"
        raw = path.read_text(encoding="utf-8")
        assert json.loads(raw) == [
            {"text": "Never gonna give you up", "offset": 0.0, "duration": 1.5},
            {"text": "Never gonna let you down", "offset": 1.5, "duration": 2.0},
        ]
        assert raw.startswith('[\n  {\n    "text"')

    def test_non_ascii_written_as_utf8(self, tmp_path) -> None:
        xml = '<body><p t="0" d="1000">café ☕</p></body>'
        cache = _cache(tmp_path, _fake_session(xml=xml))
        cache.fetch_transcript(VIDEO_ID)

        raw = (tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json").read_text(encoding="utf-8")
        assert "café ☕" in raw

    def test_surrogate_pair_reference_cached_as_emoji(self, tmp_path) -> None:
        xml = '<body><p t="0" d="1000">smile &#55357;&#56832;</p></body>'
        cache = _cache(tmp_path, _fake_session(xml=xml))

        segments = cache.fetch_transcript(VIDEO_ID)

        assert segments[0].text == "smile \U0001F600"
        raw = (tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json").read_text(encoding="utf-8")
        assert "smile \U0001F600" in raw

    def test_unencodable_text_raises_cache_error_and_leaves_no_file(self, tmp_path) -> None:
        """Text that can't be written as UTF-8 is a CacheError, never a truncated entry."""
        xml = '<body><p t="0" d="1000">broken \ud83d</p></body>'
        session = _fake_session(xml=xml)
        cache = _cache(tmp_path, session)

        with pytest.raises(CacheError):
            cache.fetch_transcript(VIDEO_ID)

        assert list((tmp_path / "transcripts").iterdir()) == []
        assert cache.index_size() == 0

    def test_english_prefix_fallback(self, tmp_path) -> None:
        """lang="en" with only en-US and fr available picks en-US."""
        session = _fake_session(codes=("en-US", "fr"))
        cache = _cache(tmp_path, session)

        cache.fetch_transcript(VIDEO_ID, "en")

        session.get.assert_called_once_with("https://www.youtube.com/api/timedtext?lang=en-US")
        assert (tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json").exists()

    def test_language_not_available(self, tmp_path) -> None:
        session = _fake_session(codes=("fr", "de"))
        cache = _cache(tmp_path, session)

        with pytest.raises(LanguageNotAvailableError, match="fr, de"):
            cache.fetch_transcript(VIDEO_ID, "ja")

        session.get.assert_not_called()
        assert cache.index_size() == 0

    def test_no_caption_tracks(self, tmp_path) -> None:
        with pytest.raises(CaptionsDisabledError):
            _cache(tmp_path, _fake_session(codes=())).fetch_transcript(VIDEO_ID)

    def test_empty_transcript_not_cached(self, tmp_path) -> None:
        """A track that parses to nothing is an error, and nothing is persisted."""
        cache = _cache(tmp_path, _fake_session(xml="<timedtext><body></body></timedtext>"))

        with pytest.raises(EmptyTranscriptError) as exc_info:
            cache.fetch_transcript(VIDEO_ID)

        assert "retrieved but contained no text segments" in exc_info.value.message
        assert list((tmp_path / "transcripts").iterdir()) == []

    def test_timed_text_http_failure(self, tmp_path) -> None:
        cache = _cache(tmp_path, _fake_session(xml_status=500))

        with pytest.raises(UpstreamHTTPError) as exc_info:
            cache.fetch_transcript(VIDEO_ID)

        assert exc_info.value.status_code == 500

    def test_invalid_input_makes_no_network_call(self, tmp_path) -> None:
        session = _fake_session()
        cache = _cache(tmp_path, session)

        with pytest.raises(InvalidVideoIdError):
            cache.fetch_transcript("https://example.com/not-youtube")

        assert _network_calls(session) == 0

    def test_write_failure_raises_cache_error(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        # Occupy the target file name with a directory so the write fails.
        (tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json" / "blocker").mkdir(parents=True)

        with pytest.raises(CacheError):
            cache.fetch_transcript(VIDEO_ID)


# ---------------------------------------------------------------------------
# fetch_transcript — cache hits
# ---------------------------------------------------------------------------

class TestCacheHits:

    def test_second_call_hits_cache(self, tmp_path) -> None:
        """Two sequential calls: one network fetch, identical results, stable index."""
        session = _fake_session()
        cache = _cache(tmp_path, session)

        first = cache.fetch_transcript(VIDEO_ID, "en")
        calls_after_first = _network_calls(session)
        size_after_first = cache.index_size()
        second = cache.fetch_transcript(VIDEO_ID, "en")

        assert first == second == _EXPECTED
        assert calls_after_first == 2
        assert _network_calls(session) == 2
        assert cache.index_size() == size_after_first == 1

    def test_miss_and_hit_log_at_debug_only(self, tmp_path, caplog) -> None:
        """The cache reports nothing above DEBUG and adds no handlers of its own."""
        cache = _cache(tmp_path)

        with caplog.at_level(logging.DEBUG, logger="yt_video_tools"):
            cache.fetch_transcript(VIDEO_ID, "en")
            cache.fetch_transcript(VIDEO_ID, "en")

        messages = [record.getMessage() for record in caplog.records]
        assert any("miss" in message for message in messages)
        assert any("hit" in message for message in messages)
        assert all(record.levelno == logging.DEBUG for record in caplog.records)
        assert logging.getLogger("yt_video_tools.cache").handlers == []

    def test_cold_start_after_clearing_index(self, tmp_path) -> None:
        """Disk alone is enough to serve a cached transcript."""
        session = _fake_session()
        cache = _cache(tmp_path, session)
        cache.fetch_transcript(VIDEO_ID)

        cache.clear_index()
        assert cache.index_size() == 0

        assert cache.fetch_transcript(VIDEO_ID) == _EXPECTED
        assert _network_calls(session) == 2
        assert cache.index_size() == 1

    def test_new_cache_instance_reads_existing_files(self, tmp_path) -> None:
        _cache(tmp_path).fetch_transcript(VIDEO_ID)

        fresh_session = _fake_session()
        fresh = _cache(tmp_path, fresh_session)

        assert fresh.fetch_transcript(VIDEO_ID) == _EXPECTED
        assert _network_calls(fresh_session) == 0

    def test_url_normalized_before_lookup(self, tmp_path) -> None:
        """A youtu.be URL hits the entry cached under the bare ID."""
        session = _fake_session()
        cache = _cache(tmp_path, session)
        cache.fetch_transcript(VIDEO_ID)

        assert cache.fetch_transcript("https://youtu.be/dQw4w9WgXcQ") == _EXPECTED
        assert _network_calls(session) == 2

    def test_preexisting_file_served_for_url_input(self, tmp_path) -> None:
        session = _fake_session()
        cache = _cache(tmp_path, session)
        (tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json").write_text(
            json.dumps([{"text": "from disk", "offset": 1, "duration": 2}]), encoding="utf-8"
        )

        segments = cache.fetch_transcript("https://youtu.be/dQw4w9WgXcQ")

        assert segments == [TranscriptSegment("from disk", 1.0, 2.0)]
        assert _network_calls(session) == 0

    def test_languages_cached_separately(self, tmp_path) -> None:
        session = _fake_session(codes=("en", "fr"))
        cache = _cache(tmp_path, session)

        cache.fetch_transcript(VIDEO_ID, "en")
        cache.fetch_transcript(VIDEO_ID, "fr")

        assert cache.index_size() == 2
        assert session.post.call_count == 2

    def test_deleted_file_is_refetched(self, tmp_path) -> None:
        """An index entry whose file vanished is not trusted."""
        session = _fake_session()
        cache = _cache(tmp_path, session)
        cache.fetch_transcript(VIDEO_ID)
        (tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json").unlink()

        assert cache.fetch_transcript(VIDEO_ID) == _EXPECTED
        assert session.post.call_count == 2

    def test_corrupt_file_is_refetched_and_repaired(self, tmp_path) -> None:
        session = _fake_session()
        cache = _cache(tmp_path, session)
        path = tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json"
        path.write_text("{not json", encoding="utf-8")

        assert cache.fetch_transcript(VIDEO_ID) == _EXPECTED
        assert session.post.call_count == 1
        assert json.loads(path.read_text(encoding="utf-8"))[0]["text"] == "Never gonna give you up"

    def test_fetch_transcript_text(self, tmp_path) -> None:
        text = _cache(tmp_path).fetch_transcript_text(VIDEO_ID)
        assert text == "Never gonna give you up Never gonna let you down"


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------

class TestAdministration:

    def test_constructor_creates_directory(self, tmp_path) -> None:
        _cache(tmp_path)
        assert (tmp_path / "transcripts").is_dir()

    def test_set_cache_dir_is_idempotent(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        target = tmp_path / "nested" / "dir"

        assert cache.set_cache_dir(target) == target
        assert cache.set_cache_dir(target) == target
        assert target.is_dir()

    def test_set_cache_dir_default(self, tmp_path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        cache = _cache(tmp_path)

        assert cache.set_cache_dir(None) == Path("transcripts")
        assert (tmp_path / "transcripts").is_dir()

    def test_switching_directory_drops_index(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        cache.fetch_transcript(VIDEO_ID)

        cache.set_cache_dir(tmp_path / "other")

        assert cache.index_size() == 0
        assert cache.get_path(VIDEO_ID) is None

    def test_clear_index_leaves_files(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        cache.fetch_transcript(VIDEO_ID)

        cache.clear_index()

        assert (tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json").exists()

    def test_get_path_never_cached(self, tmp_path) -> None:
        session = _fake_session()
        cache = _cache(tmp_path, session)

        assert cache.get_path(VIDEO_ID) is None
        assert _network_calls(session) == 0

    def test_get_path_after_fetch(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        cache.fetch_transcript(VIDEO_ID)

        assert cache.get_path(VIDEO_ID) == tmp_path / "transcripts" / "dQw4w9WgXcQ_en.json"

    def test_get_path_checks_disk_and_indexes(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        path = tmp_path / "transcripts" / "dQw4w9WgXcQ_de.json"
        path.write_text("[]", encoding="utf-8")

        assert cache.get_path("https://youtu.be/dQw4w9WgXcQ", "de") == path
        assert cache.index_size() == 1

    def test_rebuild_index_scans_directory(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        directory = tmp_path / "transcripts"
        (directory / "dQw4w9WgXcQ_en.json").write_text("[]", encoding="utf-8")
        (directory / "aaaaaaaaaaa_pt_BR.json").write_text("[]", encoding="utf-8")
        (directory / "notes.txt").write_text("ignored", encoding="utf-8")
        (directory / "short_en.json").write_text("[]", encoding="utf-8")

        assert cache.rebuild_index() == 2
        assert [key for key, _path in cache.entries()] == [
            CacheKey("aaaaaaaaaaa", "pt_BR"),
            CacheKey(VIDEO_ID, "en"),
        ]

    def test_rebuild_index_missing_directory(self, tmp_path) -> None:
        cache = _cache(tmp_path)
        (tmp_path / "transcripts").rmdir()

        assert cache.rebuild_index() == 0
