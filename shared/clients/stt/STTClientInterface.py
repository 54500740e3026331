import os
from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import BackendError, TranscriptionError

MIN_TRANSCRIPT_CHARS = 50


class STTClientInterface(ClientInterface):
    """Speech-to-text service used when a video has no usable captions."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self.stt_model = helper_config.get_string_val("STT_MODEL", default="whisper-1")
        self.stt_language = helper_config.get_string_val("STT_LANGUAGE", default="en")
        self.max_file_mb = helper_config.get_number_val("STT_MAX_FILE_MB", default=25)

    ##########################################
    ################ GETTER ##################
    ##########################################

    def _get_client_type(self) -> str:
        return "stt"

    def _get_default_timeout(self) -> float:
        # uploads of ~25MB of audio plus server-side transcription
        return 300.0

    @abstractmethod
    def _get_endpoint_transcription(self) -> str:
        """Returns the endpoint path for transcription requests (e.g. "/audio/transcriptions")."""
        pass

    @abstractmethod
    def get_transcription_form(self) -> dict:
        """Build the backend-specific form fields sent next to the audio file."""
        pass

    @abstractmethod
    def extract_transcript(self, response_text: str) -> str:
        """Extract the transcript from the raw response body."""
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_transcribe(self, audio_path: str) -> str:
        """Upload an audio file and return its transcript.

        Args:
            audio_path (str): Path to the downloaded audio file.

        Returns:
            str: The transcript text.

        Raises:
            TranscriptionError: If the file is too large, the request fails,
                or the transcript is shorter than 50 characters.
        """
        size_mb = os.path.getsize(audio_path) / 1024 / 1024
        if size_mb > self.max_file_mb:
            raise TranscriptionError(
                f"Audio file too large ({size_mb:.1f}MB). This video is very long. "
                "Try a shorter video (< 1 hour) or a video with captions."
            )

        self.logging.info("Uploading %.2f MB of audio to %s for transcription...", size_mb, self.get_engine_name())
        with open(audio_path, "rb") as fh:
            audio_bytes = fh.read()
        try:
            response = await self.do_request(
                method="POST",
                endpoint=self._get_endpoint_transcription(),
                files={"file": (os.path.basename(audio_path), audio_bytes, "audio/mpeg")},
                data=self.get_transcription_form(),
                raise_on_error=True,
            )
        except BackendError as exc:
            raise TranscriptionError(f"Transcription request failed: {exc}") from exc

        transcript = self.extract_transcript(response.text)
        if len(transcript) < MIN_TRANSCRIPT_CHARS:
            raise TranscriptionError("Transcription returned insufficient content.")
        self.logging.info("Transcription complete: %d characters.", len(transcript))
        return transcript
