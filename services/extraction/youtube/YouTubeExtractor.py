from services.extraction.extractors.ExtractorInterface import ExtractorInterface
from services.extraction.youtube.models import VideoMetadata
from services.extraction.youtube.YouTubeAudioDownloader import YouTubeAudioDownloader
from services.extraction.youtube.YouTubeCaptionFetcher import YouTubeCaptionFetcher
from services.extraction.youtube.YouTubeMetadataFetcher import YouTubeMetadataFetcher
from services.extraction.youtube.youtube_utils import (
    canonical_video_url,
    extract_video_id,
    find_repository_link,
    format_duration,
)
from shared.clients.stt.STTClientInterface import STTClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import SourceDescriptor, SourceType, TextUnit
from shared.models.errors import InsufficientContentError

MIN_DESCRIPTION_CHARS = 50
MAX_TAGS = 10

TRANSCRIPT_NOTE = "Note: This transcription is from audio only. Visual content (code on screen, slides, diagrams) is not included.\n"
TRANSCRIPT_NOTE_WITH_REPOSITORY = "However, the code repository linked in the description is listed above.\n"
TRANSCRIPT_NOTE_WITHOUT_REPOSITORY = (
    "If code examples were shown on screen, they may not appear in this transcription. "
    "Check the video description for code repository links.\n"
)


class YouTubeExtractor(ExtractorInterface):
    """Builds one text blob per video from metadata, captions or an audio transcript.

    Body text comes from official captions when one of the configured languages
    has a usable transcript, otherwise the audio is downloaded and sent to the
    speech-to-text service. The blob is assembled from named sections in a
    fixed order (see build_sections).
    """

    def __init__(
        self,
        helper_config: HelperConfig,
        stt_client: STTClientInterface,
        caption_fetcher: YouTubeCaptionFetcher | None = None,
        metadata_fetcher: YouTubeMetadataFetcher | None = None,
        audio_downloader: YouTubeAudioDownloader | None = None,
    ):
        super().__init__(helper_config=helper_config)
        self.min_chars = helper_config.get_int_val("EXTRACT_YOUTUBE_MIN_CHARS", default=200)
        self._stt_client = stt_client
        self._captions = caption_fetcher or YouTubeCaptionFetcher(helper_config=helper_config)
        self._metadata = metadata_fetcher or YouTubeMetadataFetcher(helper_config=helper_config)
        self._audio = audio_downloader or YouTubeAudioDownloader(helper_config=helper_config)

    def get_source_types(self) -> list[SourceType]:
        return [SourceType.YOUTUBE]

    ##########################################
    ################ CORE ####################
    ##########################################

    async def extract(self, source: SourceDescriptor) -> list[TextUnit]:
        video_id = extract_video_id(source.identifier)

        metadata = await self._metadata.fetch(video_id)
        self.logging.info("Video %s: '%s' by '%s'", video_id, metadata.title or "?", metadata.channel or "Unknown")
        repository_link = find_repository_link(metadata.description)

        caption_text = await self._captions.fetch(video_id)
        transcript_text = None
        if caption_text is None:
            self.logging.info("No captions for video %s, downloading and transcribing audio...", video_id)
            async with self._audio.download(video_id) as audio_path:
                transcript_text = await self._stt_client.do_transcribe(audio_path)

        sections = self.build_sections(video_id, metadata, repository_link, caption_text, transcript_text)
        content = "".join(text for _, text in sections)
        if len(content) < self.min_chars:
            raise InsufficientContentError(
                "Unable to extract meaningful content from this video.\n\n"
                f"Video: {metadata.title or canonical_video_url(video_id)}\n\n"
                "This video may be:\n"
                "• Too short or music-only (no speech)\n"
                "• Private, age-restricted, or region-locked\n"
                "Try a different public video with spoken content."
            )

        self.logging.info("Composed %d characters for video %s from sections: %s", len(content), video_id, ", ".join(name for name, _ in sections))
        return [TextUnit(text=content, metadata={"type": "youtube", "videoId": video_id})]

    ##########################################
    ############### SECTIONS #################
    ##########################################

    @staticmethod
    def build_sections(
        video_id: str,
        metadata: VideoMetadata,
        repository_link: str | None,
        caption_text: str | None,
        transcript_text: str | None,
    ) -> list[tuple[str, str]]:
        """Return the (name, text) sections of the blob in output order.

        Order: header, description, repository, chapters, captions or transcript, tags.
        Sections without content are left out; the header is always present.
        """
        sections: list[tuple[str, str]] = []

        header = ""
        if metadata.title:
            header += f"Title: {metadata.title}\n"
        if metadata.channel:
            header += f"Channel: {metadata.channel}\n"
        if metadata.duration:
            header += f"Duration: {format_duration(metadata.duration)}\n"
        header += f"URL: {canonical_video_url(video_id)}\n"
        sections.append(("header", header))

        if len(metadata.description) > MIN_DESCRIPTION_CHARS:
            sections.append(("description", f"\n[Video Description]\n{metadata.description}\n"))

        if repository_link:
            sections.append((
                "repository",
                f"\n\n[GitHub Repository]\nCode repository: {repository_link}\n(Visit the link to see the full code)\n",
            ))

        if metadata.chapters:
            lines = "\n".join(f"{format_duration(c.start_time)} - {c.title}" for c in metadata.chapters)
            sections.append(("chapters", f"\n\n[Video Chapters/Timestamps]\n{lines}\n"))

        if caption_text:
            sections.append(("captions", f"\n\n[Captions/Subtitles - Spoken Audio]\n{caption_text}\n"))
        elif transcript_text:
            note = TRANSCRIPT_NOTE + (TRANSCRIPT_NOTE_WITH_REPOSITORY if repository_link else TRANSCRIPT_NOTE_WITHOUT_REPOSITORY)
            sections.append(("transcript", f"\n\n[AI Transcription - Spoken Audio Only]\n{note}\n{transcript_text}\n"))

        if metadata.tags:
            sections.append(("tags", f"\n\n[Tags]\n{', '.join(metadata.tags[:MAX_TAGS])}\n"))

        return sections
