"""
innertube.py — Thin client for YouTube's internal "InnerTube" JSON API.

Two endpoints are used:

    player                   Playability + caption track list for a video.
    navigation/resolve_url   Turns a channel/handle URL into a browse ID.

Neither needs an API key.  The client owns no connection state of its own:
it wraps a `requests.Session` that the caller creates, passes in, and
closes.  Build one per application (or per CLI invocation) and share it.
"""

from __future__ import annotations

import requests

from yt_video_tools.errors import UpstreamHTTPError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

INNERTUBE_BASE_URL = "https://www.youtube.com/youtubei/v1"

# The ANDROID client is reliably allowed to read caption metadata without
# cookies, a consent page or an API key.
ANDROID_CLIENT_CONTEXT = {
    "clientName": "ANDROID",
    "clientVersion": "19.29.37",
    "androidSdkVersion": 30,
}

WEB_CLIENT_CONTEXT = {
    "clientName": "WEB",
    "clientVersion": "2.20240726.00.00",
}


class InnerTubeClient:
    """
    Caller-owned InnerTube client.

    Example:
        with requests.Session() as session:
            innertube = InnerTubeClient(session)
            data = innertube.player("dQw4w9WgXcQ")
    """

    def __init__(self, session: requests.Session, base_url: str = INNERTUBE_BASE_URL) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")

    def _post(self, endpoint: str, payload: dict, what: str) -> dict:
        response = self.session.post(
            f"{self.base_url}/{endpoint}",
            params={"prettyPrint": "false"},
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        if not response.ok:
            raise UpstreamHTTPError(
                message=f"InnerTube {what} API returned {response.status_code} {response.reason or ''}".rstrip(),
                status_code=response.status_code,
            )
        return response.json()

    def player(self, video_id: str) -> dict:
        """
        Fetch the player response for a video.

        Raises:
            UpstreamHTTPError: The endpoint answered with a non-2xx status.
        """
        return self._post(
            "player",
            {
                "context": {"client": ANDROID_CLIENT_CONTEXT},
                "videoId": video_id,
                "contentCheckOk": True,
                "racyCheckOk": True,
            },
            what="player",
        )

    def resolve_url(self, url: str) -> dict:
        """Resolve a youtube.com URL into its navigation endpoint."""
        return self._post(
            "navigation/resolve_url",
            {"context": {"client": WEB_CLIENT_CONTEXT}, "url": url},
            what="resolve_url",
        )
