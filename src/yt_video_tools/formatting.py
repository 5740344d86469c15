"""
formatting.py — Render engine results for the CLI and HTTP layers.

    format_text()    Transcript as one space-joined string.
    format_json()    Transcript as a JSON-serialisable dict.
    format_doc()     Transcript as markdown paragraphs with [MM:SS] markers.
    format_videos()  Video records as a list of JSON-serialisable dicts.
"""

from __future__ import annotations

from collections.abc import Iterable

from yt_video_tools.models import TranscriptSegment, VideoRecord

TRANSCRIPT_FORMATS = ("text", "json", "doc")

# A new "doc" paragraph starts once a segment begins this many seconds
# after the start of the current paragraph.
_DOC_PARAGRAPH_INTERVAL_SECS = 30


def format_text(segments: Iterable[TranscriptSegment]) -> str:
    return " ".join(segment.text for segment in segments)


def format_json(segments: list[TranscriptSegment], video_id: str, language: str) -> dict:
    """
    Build the structured transcript payload.

    Returns:
        A dict with keys videoId, language, fullText, segmentCount and
        segments (each segment has text, offset, duration in seconds).
    """
    return {
        "videoId": video_id,
        "language": language,
        "fullText": format_text(segments),
        "segmentCount": len(segments),
        "segments": [segment.to_dict() for segment in segments],
    }


def _seconds_to_mmss(seconds: float) -> str:
    """
    Convert a float timestamp (in seconds) to a MM:SS string.

    Values above 59:59 keep counting minutes (e.g. 3661.0 → "61:01").
    """
    total = int(seconds)
    mins, secs = divmod(total, 60)
    return f"{mins:02d}:{secs:02d}"


def format_doc(segments: Iterable[TranscriptSegment]) -> str:
    """
    Convert transcript segments into a readable markdown document.

    Segments are joined with spaces into flowing paragraphs, with a new
    paragraph starting every ~30 seconds.  Each paragraph is prefixed with
    a bold **[MM:SS]** timestamp marking the start of that time window.

    Returns:
        Markdown with blank lines between paragraphs, or "" for no segments.
    """
    paragraphs: list[str] = []
    current_texts: list[str] = []
    paragraph_start: float | None = None

    for segment in segments:
        if paragraph_start is None:
            paragraph_start = segment.offset
            current_texts.append(segment.text)
        elif segment.offset - paragraph_start >= _DOC_PARAGRAPH_INTERVAL_SECS:
            paragraphs.append(f"**[{_seconds_to_mmss(paragraph_start)}]** {' '.join(current_texts)}")
            paragraph_start = segment.offset
            current_texts = [segment.text]
        else:
            current_texts.append(segment.text)

    # Flush the last paragraph.
    if current_texts and paragraph_start is not None:
        paragraphs.append(f"**[{_seconds_to_mmss(paragraph_start)}]** {' '.join(current_texts)}")

    return "\n\n".join(paragraphs)


def format_videos(records: Iterable[VideoRecord]) -> list[dict]:
    return [record.to_dict() for record in records]
