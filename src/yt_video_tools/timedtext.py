"""
timedtext.py — Parse YouTube timed-text caption XML into segments.

Two dialects exist in the wild:

    format 3 (current):  <p t="1500" d="2000">Hello <s>world</s></p>
                         t/d are integer milliseconds.
    legacy:              <text start="1.5" dur="2.0">Hello world</text>
                         start/dur are (possibly fractional) seconds.

The legacy dialect is only tried when format 3 produced nothing.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from yt_video_tools.models import TranscriptSegment
from yt_video_tools.xmltext import decode_entities, iter_elements, strip_tags


def _clean_text(inner: str) -> str:
    return decode_entities(strip_tags(inner)).strip()


def _millis(value: str) -> float:
    if not value.isdigit():
        raise ValueError(value)
    return int(value) / 1000


def _iter_segments(
    xml: str,
    tag: str,
    start_attr: str,
    duration_attr: str,
    convert: Callable[[str], float],
    default_duration: str | None = None,
) -> Iterator[TranscriptSegment]:
    for attrs, inner in iter_elements(xml, tag):
        start = attrs.get(start_attr)
        duration = attrs.get(duration_attr, default_duration)
        if start is None or duration is None:
            continue
        try:
            offset, length = convert(start), convert(duration)
        except ValueError:
            continue
        text = _clean_text(inner)
        if not text:
            continue
        yield TranscriptSegment(text=text, offset=offset, duration=length)


def parse_timed_text(xml: str) -> list[TranscriptSegment]:
    """
    Parse caption XML into segments, in document order.

    Inline tags are stripped, entities decoded, and segments whose text is
    blank after trimming are dropped.  Never raises on odd input: a document
    that matches neither dialect simply yields an empty list.
    """
    segments = list(_iter_segments(xml, "p", "t", "d", _millis))
    if segments:
        return segments

    # Legacy dialect; a missing dur is treated as zero-length.
    return list(_iter_segments(xml, "text", "start", "dur", float, default_duration="0"))
