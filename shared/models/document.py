"""Pydantic models for sources and the text derived from them.

Hierarchy:
  SourceDescriptor  : one uploaded artifact (file bytes or URL) handed to the Extractor.
  TextUnit          : a span of extracted text plus its source metadata.
  Chunk             : a size-bounded window of a TextUnit, the unit that gets embedded.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class SourceType(str, Enum):
    """Kinds of source the Extractor knows how to read."""

    PDF = "pdf"
    CSV = "csv"
    TXT = "txt"
    URL = "url"
    YOUTUBE = "youtube"

    @classmethod
    def from_filename(cls, filename: str) -> "SourceType":
        """Guess the source type from a file extension.

        Raises:
            ValueError: If the extension is not one of .pdf, .csv or .txt.
        """
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        for member in (cls.PDF, cls.CSV, cls.TXT):
            if member.value == ext:
                return member
        raise ValueError(f"File type '.{ext}' not supported. Only PDF, CSV, and TXT allowed.")


class SourceDescriptor(BaseModel):
    """One uploaded artifact.

    Never persisted on its own; its identifier, type and upload time are
    stamped onto every chunk derived from it.

    Attributes:
        source_type:  The kind of source.
        identifier:   Original filename for uploads, the URL for web sources.
        content:      Raw file bytes. None for URL sources.
        uploaded_at:  ISO-8601 upload timestamp.
    """

    source_type: SourceType
    identifier: str
    content: bytes | None = None
    uploaded_at: str = Field(default_factory=utc_now_iso)

    def is_url(self) -> bool:
        return self.source_type in (SourceType.URL, SourceType.YOUTUBE)

    def origin_metadata(self) -> dict[str, Any]:
        """Metadata every chunk of this source inherits (filename or url, upload time)."""
        key = "url" if self.is_url() else "filename"
        return {key: self.identifier, "source": self.identifier, "uploadedAt": self.uploaded_at}


class TextUnit(BaseModel):
    """A span of extracted text with its metadata (type, loc, videoId, ...)."""

    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Chunk(BaseModel):
    """A contiguous, size-bounded window of extracted text.

    The owning user id lives in metadata["userId"]; it is set once by the
    ingestion pipeline and the model is frozen afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: str = Field(default_factory=utc_now_iso)

    @property
    def user_id(self) -> str | None:
        return self.metadata.get("userId")

    @property
    def source_type(self) -> str:
        return self.metadata.get("type") or "unknown"

    @property
    def source(self) -> str:
        meta = self.metadata
        return meta.get("source") or meta.get("filename") or meta.get("url") or "unknown"
