"""
config.py — Runtime settings read from the environment.

    YOUTUBE_API_KEY          Data API v3 key (listing, trending, search).
    YT_TRANSCRIPT_CACHE_DIR  Transcript cache directory (default "transcripts").

The feed, resolver and transcript paths work without an API key.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from yt_video_tools.cache import DEFAULT_CACHE_DIR

API_KEY_ENV = "YOUTUBE_API_KEY"
CACHE_DIR_ENV = "YT_TRANSCRIPT_CACHE_DIR"


@dataclass(frozen=True)
class Settings:
    """
    Attributes:
        api_key:   Data API key, or "" when not configured.
        cache_dir: Directory for cached transcript JSON files.
    """
    api_key: str = ""
    cache_dir: str = DEFAULT_CACHE_DIR


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from `environ` (defaults to os.environ); blanks count as unset."""
    env = os.environ if environ is None else environ
    return Settings(
        api_key=env.get(API_KEY_ENV, "").strip(),
        cache_dir=env.get(CACHE_DIR_ENV, "").strip() or DEFAULT_CACHE_DIR,
    )
