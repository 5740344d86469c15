"""
api.py — FastAPI REST API for yt-video-tools.

Endpoints:
    GET /channels/{channel}/videos   Latest videos of a channel (RSS feed).
    GET /transcript/{video_id}       A video's transcript (cached on disk); ID or URL.
    GET /trending                    Most popular videos (Data API key needed).
    GET /search                      Video search (Data API key needed).
    GET /health                      Health check.

Run with:
    uv run uvicorn yt_video_tools.api:app

The HTTP session, InnerTube client, resolver and transcript cache are
built once in the lifespan handler and shared by every request.  Settings
come from the environment (see config.py).

The global exception handler converts any YouTubeToolsError into a JSON
error using the status code stored on the exception.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import requests
from fastapi import Depends, FastAPI, Path, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from yt_video_tools.cache import DEFAULT_LANGUAGE, TranscriptCache, parse_video_id
from yt_video_tools.config import load_settings
from yt_video_tools.data_api import DataApiClient
from yt_video_tools.errors import YouTubeToolsError
from yt_video_tools.feed import FEED_MAX_ENTRIES, fetch_feed
from yt_video_tools.formatting import format_doc, format_json, format_text, format_videos
from yt_video_tools.innertube import InnerTubeClient
from yt_video_tools.resolver import ChannelResolver


# ---------------------------------------------------------------------------
# App setup
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = load_settings()
    session = requests.Session()
    innertube = InnerTubeClient(session)

    app.state.settings = settings
    app.state.session = session
    app.state.resolver = ChannelResolver(innertube)
    app.state.cache = TranscriptCache(innertube, settings.cache_dir)
    try:
        yield
    finally:
        session.close()


app = FastAPI(
    title="YouTube Video Tools API",
    description="Channel feeds, cached video transcripts, trending videos and search.",
    version="0.1.0",
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_session(request: Request) -> requests.Session:
    return request.app.state.session


def get_resolver(request: Request) -> ChannelResolver:
    return request.app.state.resolver


def get_cache(request: Request) -> TranscriptCache:
    return request.app.state.cache


def get_data_api(request: Request) -> DataApiClient:
    # Raises ConfigurationError (handled below) when no key is configured.
    return DataApiClient(request.app.state.session, request.app.state.settings.api_key)


# ---------------------------------------------------------------------------
# Global error handler
# ---------------------------------------------------------------------------

@app.exception_handler(YouTubeToolsError)
async def tools_error_handler(request: Request, exc: YouTubeToolsError) -> JSONResponse:
    """Translate any YouTubeToolsError (or subclass) into an HTTP error response."""
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.message},
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@app.get("/channels/{channel:path}/videos")
def channel_videos(
    channel: str = Path(description="Channel ID, handle (@name), bare handle, or channel URL."),
    max_results: int = Query(default=5, ge=1, le=FEED_MAX_ENTRIES),
    resolver: ChannelResolver = Depends(get_resolver),
    session: requests.Session = Depends(get_session),
) -> JSONResponse:
    """
    Latest videos of a channel from the public RSS feed (no API key).

    A channel that cannot be resolved is a 404 with an explanatory message.
    """
    channel_id = resolver.resolve(channel)
    if channel_id is None:
        return JSONResponse(
            status_code=404,
            content={"error": f'No YouTube channel found matching "{channel}".'},
        )

    videos = fetch_feed(session, channel_id, max_results)
    return JSONResponse(content={
        "channelId": channel_id,
        "videos": format_videos(videos),
    })


# response_model=None because the response class depends on `format`.
@app.get("/transcript/{video_id:path}", response_model=None)
def get_transcript(
    video_id: str,
    lang: str = Query(default=DEFAULT_LANGUAGE, description="Caption language code."),
    format: str = Query(
        default="text",
        description="'text' for plain text, 'json' for timestamped segments, 'doc' for markdown.",
        pattern="^(text|json|doc)$",
    ),
    cache: TranscriptCache = Depends(get_cache),
) -> PlainTextResponse | JSONResponse:
    """
    Transcript of a single video.

    **video_id** may be a bare 11-character ID or a full video URL,
    percent-encoded or not (the route takes the rest of the path).  The
    first request for a (video, language) pair fetches from YouTube; every
    later one is served from the cache directory.
    """
    canonical_id = parse_video_id(video_id)
    segments = cache.fetch_transcript(canonical_id, lang)

    if format == "json":
        return JSONResponse(content=format_json(segments, canonical_id, lang))
    if format == "doc":
        return PlainTextResponse(content=format_doc(segments))
    return PlainTextResponse(content=format_text(segments))


@app.get("/trending")
def trending(
    region: str = Query(default="US", min_length=2, max_length=2),
    max_results: int = Query(default=10, ge=1, le=50),
    category: str | None = Query(default=None),
    data_api: DataApiClient = Depends(get_data_api),
) -> JSONResponse:
    """Most popular videos for a region, optionally within one category."""
    videos = data_api.list_trending(region, max_results, category)
    return JSONResponse(content={"region": region, "videos": format_videos(videos)})


@app.get("/search")
def search_videos(
    q: str = Query(description="Free-text search topic."),
    max_results: int = Query(default=10, ge=1, le=50),
    order: str = Query(default="relevance", pattern="^(relevance|date|viewCount)$"),
    data_api: DataApiClient = Depends(get_data_api),
) -> JSONResponse:
    """Search videos by topic."""
    videos = data_api.search(q, max_results, order)
    return JSONResponse(content={"query": q, "videos": format_videos(videos)})


@app.get("/health")
async def health() -> dict:
    """Minimal health-check endpoint."""
    return {"status": "ok"}
