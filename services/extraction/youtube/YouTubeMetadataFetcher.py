import json

import httpx

from services.extraction.helpers.command import run_command
from services.extraction.youtube.models import VideoMetadata
from services.extraction.youtube.youtube_utils import canonical_video_url
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import ExtractionError

OEMBED_URL = "https://www.youtube.com/oembed"


class YouTubeMetadataFetcher:
    """Video metadata via `yt-dlp --dump-json`, with the public oEmbed endpoint as fallback.

    Metadata is best-effort: when both lookups fail an empty VideoMetadata is returned.
    """

    def __init__(self, helper_config: HelperConfig, command_runner=run_command, transport: httpx.AsyncBaseTransport | None = None):
        self.logging = helper_config.get_logger()
        self._run_command = command_runner
        self._transport = transport
        self.timeout = helper_config.get_number_val("EXTRACT_COMMAND_TIMEOUT", default=30)

    async def fetch(self, video_id: str) -> VideoMetadata:
        try:
            return await self._fetch_with_ytdlp(video_id)
        except (ExtractionError, ValueError) as exc:
            self.logging.warning("Could not fetch full metadata for video %s, using fallback: %s", video_id, exc)

        try:
            return await self._fetch_with_oembed(video_id)
        except (httpx.HTTPError, ValueError) as exc:
            self.logging.warning("oEmbed metadata fallback failed for video %s: %s", video_id, exc)

        return VideoMetadata()

    async def _fetch_with_ytdlp(self, video_id: str) -> VideoMetadata:
        result = await self._run_command(
            ["yt-dlp", "--dump-json", "--no-warnings", "--no-playlist", canonical_video_url(video_id)],
            timeout=self.timeout,
            check=True,
        )
        return VideoMetadata.from_ytdlp(json.loads(result.stdout))

    async def _fetch_with_oembed(self, video_id: str) -> VideoMetadata:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(OEMBED_URL, params={"url": canonical_video_url(video_id), "format": "json"})
            response.raise_for_status()
        return VideoMetadata.from_oembed(response.json())
