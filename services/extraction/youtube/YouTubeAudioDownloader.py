import os
import tempfile
from contextlib import asynccontextmanager
from typing import AsyncIterator

from services.extraction.helpers.command import CommandResult, run_command
from services.extraction.youtube.youtube_utils import canonical_video_url
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import ExtractionError

LOGIN_REQUIRED_MESSAGE = "YouTube requires login. Refresh cookies and try again."
RESTRICTED_MESSAGE = (
    "This video might be:\n"
    "• Region-restricted\n"
    "• Age-restricted\n"
    "• Premium/Members-only content\n\n"
    "Try a different public video"
)


class YouTubeAudioDownloader:
    """Downloads the audio track of a video as mp3 with yt-dlp.

    download() is an async context manager: the audio file and the optional
    cookie file live in a temporary directory that is removed on every exit path.
    """

    def __init__(self, helper_config: HelperConfig, command_runner=run_command):
        self.logging = helper_config.get_logger()
        self._run_command = command_runner
        self.list_timeout = helper_config.get_number_val("EXTRACT_COMMAND_TIMEOUT", default=30)
        self.download_timeout = helper_config.get_number_val("EXTRACT_AUDIO_TIMEOUT", default=300)
        self.max_file_mb = helper_config.get_number_val("STT_MAX_FILE_MB", default=25)
        self._cookies = helper_config.get_string_val("YOUTUBE_COOKIES", default="")

    ##########################################
    ################ CORE ####################
    ##########################################

    @asynccontextmanager
    async def download(self, video_id: str) -> AsyncIterator[str]:
        """Yield the path of the downloaded mp3.

        Raises:
            ExtractionError: If yt-dlp fails, produces no file, or the file is too large.
            CommandTimeoutError: If listing formats or the download exceeds its timeout.
        """
        with tempfile.TemporaryDirectory(prefix="nurodesk_audio_") as tmp_dir:
            cookies_path = self._write_cookies(tmp_dir)
            video_url = canonical_video_url(video_id)

            audio_format = await self._choose_format(video_url, cookies_path)
            self.logging.info("Downloading audio of video %s (format %s)...", video_id, audio_format)

            result = await self._run_command(
                self._build_download_command(video_url, audio_format, cookies_path, os.path.join(tmp_dir, f"{video_id}.%(ext)s")),
                timeout=self.download_timeout,
            )
            if not result.ok:
                raise self._translate_error(result)

            output_path = os.path.join(tmp_dir, f"{video_id}.mp3")
            if not os.path.exists(output_path):
                raise ExtractionError("Audio download failed - file not created.")

            size_mb = os.path.getsize(output_path) / 1024 / 1024
            self.logging.info("Audio downloaded: %.2f MB", size_mb)
            if size_mb > self.max_file_mb:
                raise ExtractionError(
                    f"Audio file too large ({size_mb:.1f}MB).\n"
                    "This video is very long. Try:\n"
                    "1. A shorter video (< 1 hour)\n"
                    "2. Or use a video with captions"
                )
            yield output_path

    ##########################################
    ############### HELPERS ##################
    ##########################################

    def _write_cookies(self, tmp_dir: str) -> str | None:
        if not self._cookies:
            return None
        cookies_path = os.path.join(tmp_dir, "cookies.txt")
        with open(cookies_path, "w", encoding="utf-8") as fh:
            fh.write(self._cookies)
        return cookies_path

    async def _choose_format(self, video_url: str, cookies_path: str | None) -> str:
        """Prefer bestaudio; fall back to the common m4a (140) or opus (251) ids when no audio-only format is listed."""
        args = ["yt-dlp", "--list-formats"]
        if cookies_path:
            args += ["--cookies", cookies_path]
        result = await self._run_command(args + [video_url], timeout=self.list_timeout)
        if not result.ok:
            raise self._translate_error(result)

        listing = result.stdout
        if "audio only" in listing:
            return "bestaudio/best"
        if "140" in listing:
            return "140"
        if "251" in listing:
            return "251"
        return "bestaudio/best"

    @staticmethod
    def _build_download_command(video_url: str, audio_format: str, cookies_path: str | None, output_template: str) -> list[str]:
        args = [
            "yt-dlp",
            "--no-warnings",
            "--no-check-certificates",
            "--extractor-args", "youtube:player_client=android,music",
        ]
        if cookies_path:
            args += ["--cookies", cookies_path]
        args += [
            "-f", audio_format,
            "-x",
            "--audio-format", "mp3",
            "--audio-quality", "5",
            "--no-playlist",
            "--max-filesize", "26M",
            "-o", output_template,
            video_url,
        ]
        return args

    @staticmethod
    def _translate_error(result: CommandResult) -> ExtractionError:
        output = f"{result.stderr}\n{result.stdout}"
        if "Sign in to confirm" in output:
            return ExtractionError(LOGIN_REQUIRED_MESSAGE)
        if "403" in output or "Forbidden" in output:
            return ExtractionError(RESTRICTED_MESSAGE)
        return ExtractionError(f"Audio download failed: {result.stderr.strip()[:500]}")
