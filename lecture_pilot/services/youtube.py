from __future__ import annotations

import logging
import re

import httpx

from lecture_pilot.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

_YT_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")

# Known link shapes; the id runs until the next '#', '&', '?' or '/'
_YT_MARKER_RE = re.compile(
    r"(?:youtu\.be/|/v/|/u/\w/|/embed/|/shorts/|/live/|watch\?v=|[?&]v=)([^#&?/]*)"
)


def extract_youtube_video_id(url: str) -> str | None:
    """
    Supports:
    - https://www.youtube.com/watch?v=VIDEOID
    - https://www.youtube.com/watch?feature=share&v=VIDEOID
    - https://youtu.be/VIDEOID
    - https://www.youtube.com/embed/VIDEOID
    - https://www.youtube.com/shorts/VIDEOID
    - https://www.youtube.com/v/VIDEOID
    """
    m = _YT_MARKER_RE.search((url or "").strip())
    if not m:
        return None
    vid = m.group(1)
    return vid if _YT_ID_RE.match(vid) else None


def build_video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


async def fetch_video_title(url: str, *, cfg: Settings | None = None) -> str | None:
    """
    Public oEmbed lookup. Best-effort: any failure is logged and yields None.
    """
    cfg = cfg or default_settings
    try:
        async with httpx.AsyncClient(timeout=cfg.http_timeout_sec) as client:
            r = await client.get(cfg.noembed_url, params={"url": url})
            r.raise_for_status()
            data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Could not fetch video metadata for %s: %s", url, e)
        return None

    title = data.get("title") if isinstance(data, dict) else None
    if not isinstance(title, str) or not title.strip():
        return None
    return title.strip()
