"""
cli.py — Command-line interface for yt-video-tools.

Provides the `yt-video-tools` command group (registered as a console script
in pyproject.toml):

    channel-videos  Latest videos of a channel (RSS feed, no API key).
    transcript      A video's transcript, served from the local cache.
    trending        Most popular videos for a region (needs an API key).
    search          Search videos by topic (needs an API key).
    cache path      Where a transcript is cached, without fetching it.
    cache list      Every transcript in the cache directory.

Usage examples:
    yt-video-tools channel-videos @RickAstleyYT -n 3
    yt-video-tools transcript https://youtu.be/dQw4w9WgXcQ --format doc
    YOUTUBE_API_KEY=... yt-video-tools search "rust async" --order date
    yt-video-tools cache list
"""

from __future__ import annotations

import json
import logging
import sys

import click
import requests

from yt_video_tools.cache import DEFAULT_CACHE_DIR, DEFAULT_LANGUAGE, TranscriptCache, parse_video_id
from yt_video_tools.config import API_KEY_ENV, CACHE_DIR_ENV
from yt_video_tools.data_api import SEARCH_ORDERS, DataApiClient
from yt_video_tools.errors import YouTubeToolsError
from yt_video_tools.feed import FEED_MAX_ENTRIES, fetch_feed
from yt_video_tools.formatting import (
    TRANSCRIPT_FORMATS,
    format_doc,
    format_json,
    format_text,
    format_videos,
)
from yt_video_tools.innertube import InnerTubeClient
from yt_video_tools.resolver import ChannelResolver


# ---------------------------------------------------------------------------
# Shared state — one HTTP session per invocation
# ---------------------------------------------------------------------------

class Services:
    """
    Everything a subcommand needs, built once per CLI invocation.

    The HTTP session is registered with click's context so it is closed
    when the command finishes.  The transcript cache (and its directory)
    is only created by the commands that use it.
    """

    def __init__(self, session: requests.Session, api_key: str, cache_dir: str) -> None:
        self.session = session
        self.api_key = api_key
        self.innertube = InnerTubeClient(session)
        self.resolver = ChannelResolver(self.innertube)
        self.cache_dir = cache_dir
        self._cache: TranscriptCache | None = None

    @property
    def cache(self) -> TranscriptCache:
        # Raises CacheError when the directory cannot be created.
        if self._cache is None:
            self._cache = TranscriptCache(self.innertube, self.cache_dir)
        return self._cache

    def data_api(self) -> DataApiClient:
        return DataApiClient(self.session, self.api_key)


def _fail(exc: YouTubeToolsError) -> None:
    # Clean one-line message on stderr; a traceback wouldn't help end-users.
    click.echo(f"Error: {exc.message}", err=True)
    sys.exit(1)


def _emit(text: str, output: str | None) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as fh:
            fh.write(text)
            fh.write("\n")
        click.echo(f"Written to {output}", err=True)
    else:
        click.echo(text)


def _dump(data) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# CLI group — the top-level `yt-video-tools` command
# ---------------------------------------------------------------------------

@click.group()
@click.option(
    "--api-key",
    envvar=API_KEY_ENV,
    default="",
    show_envvar=True,
    help="YouTube Data API v3 key (only needed for trending and search).",
)
@click.option(
    "--cache-dir",
    envvar=CACHE_DIR_ENV,
    default=DEFAULT_CACHE_DIR,
    show_default=True,
    show_envvar=True,
    help="Directory where transcript JSON files are cached.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log cache and resolver decisions to stderr.")
@click.pass_context
def main(ctx: click.Context, api_key: str, cache_dir: str, verbose: bool) -> None:
    """
    YouTube tools — channel feeds, cached transcripts, trending and search.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    session = ctx.with_resource(requests.Session())
    ctx.obj = Services(session, api_key, cache_dir)


# ---------------------------------------------------------------------------
# Subcommand: channel-videos
# ---------------------------------------------------------------------------

@main.command("channel-videos")
@click.argument("channel")
@click.option(
    "--max-results", "-n",
    type=click.IntRange(1, FEED_MAX_ENTRIES),
    default=5,
    show_default=True,
    help=f"Number of videos to return (1-{FEED_MAX_ENTRIES}).",
)
@click.pass_obj
def channel_videos(services: Services, channel: str, max_results: int) -> None:
    """
    List the most recent videos of a channel.

    CHANNEL can be a channel ID (UC...), a handle (@name), a bare handle,
    or a youtube.com channel URL.  Uses the public RSS feed: no API key.
    """
    channel_id = services.resolver.resolve(channel)
    if channel_id is None:
        click.echo(f'No YouTube channel found matching "{channel}".', err=True)
        sys.exit(1)

    try:
        videos = fetch_feed(services.session, channel_id, max_results)
    except YouTubeToolsError as exc:
        _fail(exc)

    if not videos:
        click.echo(f'No videos found for channel "{channel}" (ID: {channel_id}).')
        return

    click.echo(_dump(format_videos(videos)))


# ---------------------------------------------------------------------------
# Subcommand: transcript
# ---------------------------------------------------------------------------

@main.command()
@click.argument("video", metavar="URL_OR_ID")
@click.option("--lang", "-l", default=DEFAULT_LANGUAGE, show_default=True, help="Caption language code.")
@click.option(
    "--format", "-f",
    "fmt",
    type=click.Choice(TRANSCRIPT_FORMATS, case_sensitive=False),
    default="text",
    show_default=True,
    help="Output format: plain text, JSON with timestamps, or readable markdown document.",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="Write output to a file instead of stdout.",
)
@click.pass_obj
def transcript(services: Services, video: str, lang: str, fmt: str, output: str | None) -> None:
    """
    Fetch a video transcript, caching it on disk.

    VIDEO can be a full YouTube URL or an 11-character video ID.  A cached
    transcript is returned without touching the network.
    """
    try:
        video_id = parse_video_id(video)
        segments = services.cache.fetch_transcript(video_id, lang)
    except YouTubeToolsError as exc:
        _fail(exc)

    fmt = fmt.lower()
    if fmt == "json":
        text = _dump(format_json(segments, video_id, lang))
    elif fmt == "doc":
        text = format_doc(segments)
    else:
        text = format_text(segments)
    _emit(text, output)


# ---------------------------------------------------------------------------
# Subcommands: trending / search (Data API)
# ---------------------------------------------------------------------------

@main.command()
@click.option("--region", default="US", show_default=True, help="ISO 3166-1 alpha-2 country code.")
@click.option("--max-results", "-n", type=click.IntRange(1, 50), default=10, show_default=True)
@click.option("--category", default=None, help="Video category ID filter (e.g. 10 for Music).")
@click.pass_obj
def trending(services: Services, region: str, max_results: int, category: str | None) -> None:
    """List trending (most popular) videos for a region."""
    try:
        videos = services.data_api().list_trending(region, max_results, category)
    except YouTubeToolsError as exc:
        _fail(exc)

    if not videos:
        click.echo(f"No trending videos found for region {region}.")
        return
    click.echo(_dump(format_videos(videos)))


@main.command()
@click.argument("topic")
@click.option("--max-results", "-n", type=click.IntRange(1, 50), default=10, show_default=True)
@click.option(
    "--order",
    type=click.Choice(SEARCH_ORDERS),
    default="relevance",
    show_default=True,
    help="Sort order of the results.",
)
@click.pass_obj
def search(services: Services, topic: str, max_results: int, order: str) -> None:
    """Search YouTube videos by TOPIC."""
    try:
        videos = services.data_api().search(topic, max_results, order)
    except YouTubeToolsError as exc:
        _fail(exc)

    if not videos:
        click.echo(f"No videos found for '{topic}'.")
        return
    click.echo(_dump(format_videos(videos)))


# ---------------------------------------------------------------------------
# Subcommand group: cache
# ---------------------------------------------------------------------------

@main.group()
def cache() -> None:
    """Inspect the local transcript cache."""


@cache.command("path")
@click.argument("video", metavar="URL_OR_ID")
@click.option("--lang", "-l", default=DEFAULT_LANGUAGE, show_default=True)
@click.pass_obj
def cache_path(services: Services, video: str, lang: str) -> None:
    """Print where a transcript is cached (exit 1 if it isn't)."""
    try:
        path = services.cache.get_path(video, lang)
    except YouTubeToolsError as exc:
        _fail(exc)

    if path is None:
        click.echo(f"Transcript for {video} ({lang}) is not cached.", err=True)
        sys.exit(1)
    click.echo(str(path))


@cache.command("list")
@click.pass_obj
def cache_list(services: Services) -> None:
    """List every cached transcript."""
    try:
        count = services.cache.rebuild_index()
    except YouTubeToolsError as exc:
        _fail(exc)

    if count == 0:
        click.echo(f"No cached transcripts in {services.cache.cache_dir}.")
        return

    for key, path in services.cache.entries():
        click.echo(f"{key.video_id}  {key.language:<8} {path}")
