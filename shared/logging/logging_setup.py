import logging
import logging.config
import os
from datetime import datetime

from pytz import timezone

APP_LOGGER_NAME = "nurodesk"

# third-party loggers that are only useful when debugging
_CHATTY_LOGGERS = ("httpx", "httpcore", "multipart", "yt_dlp")

# the PDF parser reports recoverable structure problems on nearly every scanned file
_PDF_LOGGERS = ("PyPDF2", "pypdf")

_LEVEL_PREFIX = {
    logging.CRITICAL: "⛔ ",
    logging.ERROR: "⛔ ",
    logging.WARNING: "⚠️ ",
}


def _resolve_level() -> int:
    level_name = os.getenv("LOG_LEVEL", "info").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


class PdfNoiseFilter(logging.Filter):
    """Drop non-error records emitted by the PDF parser."""

    def filter(self, record: logging.LogRecord) -> bool:
        return not (record.name.startswith(_PDF_LOGGERS) and record.levelno < logging.ERROR)


class CustomFormatter(logging.Formatter):
    """Formats timestamps in the configured timezone and marks warnings and errors."""

    def __init__(self, tz_name: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        stamp = datetime.fromtimestamp(record.created, self.tz)
        return stamp.strftime(datefmt) if datefmt else stamp.isoformat()

    def format(self, record):
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # malformed third-party record
            message = str(record.msg)
        record.msg = _LEVEL_PREFIX.get(record.levelno, "") + message
        record.args = ()
        return super().format(record)


def build_logging_config(log_dir: str, tz_name: str, level: int) -> dict:
    formatter = {
        "()": CustomFormatter,
        "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
        "tz_name": tz_name,
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": formatter},
        "filters": {"pdf_noise": {"()": PdfNoiseFilter}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "standard",
                "stream": "ext://sys.stdout",
                "filters": ["pdf_noise"],
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "standard",
                "filename": os.path.join(log_dir, "app.log"),
                "maxBytes": 5 * 1024 * 1024,
                "backupCount": 3,
                "encoding": "utf-8",
                "filters": ["pdf_noise"],
            },
        },
        "root": {"handlers": ["console", "file"], "level": level},
    }


def setup_logging() -> logging.Logger:
    """Configure console and rotating file logging for the whole process.

    Reads LOG_LEVEL, TIMEZONE and ROOT_DIR (logs go to $ROOT_DIR/logs/app.log).

    Returns:
        logging.Logger: The application logger.
    """
    level = _resolve_level()
    log_dir = os.path.join(os.getenv("ROOT_DIR", os.getcwd()), "logs")
    os.makedirs(log_dir, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_dir, os.getenv("TIMEZONE", "Europe/Berlin"), level))

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)

    return logging.getLogger(APP_LOGGER_NAME)
