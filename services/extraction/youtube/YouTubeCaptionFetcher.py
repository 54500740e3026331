import asyncio

from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from shared.helper.HelperConfig import HelperConfig

DEFAULT_CAPTION_LANGUAGES = ["en", "hi", "es", "fr", "de", "ja", "ko", "pt", "ru", "ar"]


class YouTubeCaptionFetcher:
    """Official captions, tried language by language.

    The first transcript longer than EXTRACT_CAPTION_MIN_CHARS wins. Returns None
    when no language yields a usable transcript, so the caller can fall back to
    audio transcription.
    """

    def __init__(self, helper_config: HelperConfig, api: YouTubeTranscriptApi | None = None):
        self.logging = helper_config.get_logger()
        self.languages = helper_config.get_list_val("EXTRACT_CAPTION_LANGUAGES", default=DEFAULT_CAPTION_LANGUAGES)
        self.min_chars = helper_config.get_int_val("EXTRACT_CAPTION_MIN_CHARS", default=200)
        self._api = api or YouTubeTranscriptApi()

    async def fetch(self, video_id: str) -> str | None:
        for language in self.languages:
            try:
                text = await asyncio.to_thread(self._fetch_language, video_id, language)
            except (CouldNotRetrieveTranscript, OSError) as exc:
                self.logging.debug("No %s captions for video %s: %s", language, video_id, type(exc).__name__)
                continue
            if len(text) > self.min_chars:
                self.logging.info("Found %s captions for video %s: %d characters.", language.upper(), video_id, len(text))
                return text

        self.logging.info("No usable captions found for video %s in any of %d languages.", video_id, len(self.languages))
        return None

    def _fetch_language(self, video_id: str, language: str) -> str:
        transcript = self._api.fetch(video_id, languages=[language])
        return " ".join(snippet.text.strip() for snippet in transcript if snippet.text and snippet.text.strip())
