"""Pure helpers for YouTube URLs, durations and description links."""

import re
from urllib.parse import urlparse

from shared.models.errors import InvalidURLError

YOUTUBE_HOSTS = ("youtube.com", "youtu.be")

# tried in order, the first match wins
VIDEO_ID_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
    re.compile(r"youtube\.com/shorts/([^&\n?#]+)"),
]

REPOSITORY_PATTERNS = [
    re.compile(r"https?://github\.com/[a-zA-Z0-9\-_]+/[a-zA-Z0-9\-_.]+"),
    re.compile(r"github\.com/[a-zA-Z0-9\-_]+/[a-zA-Z0-9\-_.]+"),
]


def is_youtube_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in YOUTUBE_HOSTS)


def extract_video_id(url: str) -> str:
    """Resolve the canonical video id from watch, short-link, embed and shorts URLs.

    Raises:
        InvalidURLError: If no known URL shape matches.
    """
    for pattern in VIDEO_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1).split("&")[0].split("?")[0]
    raise InvalidURLError(f"Invalid YouTube URL format: '{url}'.")


def canonical_video_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def format_duration(seconds: float | int) -> str:
    """Format seconds as M:SS, or H:MM:SS from one hour on."""
    seconds = int(seconds or 0)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def find_repository_link(description: str | None) -> str | None:
    """Return the first GitHub repository link in a video description, if any."""
    if not description:
        return None
    for pattern in REPOSITORY_PATTERNS:
        match = pattern.search(description)
        if match:
            link = match.group(0).rstrip(".")
            return link if link.startswith("http") else f"https://{link}"
    return None
