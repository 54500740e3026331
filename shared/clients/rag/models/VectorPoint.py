"""VectorPoint model: payload stored alongside each chunk vector in the index."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from shared.models.document import Chunk


class VectorPoint(BaseModel):
    """Payload stored alongside each vector chunk in a RAG backend.

    The user_id field is mandatory and is the only tenancy boundary: every
    search is filtered on it and it must never be absent or empty.

    Attributes:
        user_id:      MANDATORY, opaque id of the owning user ("userId" on the wire).
        text:         Raw text content of this chunk.
        type:         Source type (pdf, pdf_ocr, csv, txt, url, youtube).
        source:       Filename or URL of the originating source.
        uploaded_at:  ISO-8601 upload timestamp ("uploadedAt").
        filename:     Original filename for file uploads.
        url:          Original URL for web sources.
        video_id:     Canonical YouTube video id ("videoId").
        loc:          Location inside the source, e.g. {"pageNumber": 3}.
    """

    model_config = ConfigDict(populate_by_name=True)

    # tenancy key of the point
    user_id: str = Field(alias="userId", min_length=1)

    # Chunk content
    text: str
    type: str = "unknown"
    source: str = "unknown"
    uploaded_at: str = Field(alias="uploadedAt")

    # Optional provenance
    filename: str | None = None
    url: str | None = None
    video_id: str | None = Field(default=None, alias="videoId")
    loc: dict[str, Any] | None = None

    @classmethod
    def from_chunk(cls, chunk: Chunk) -> "VectorPoint":
        """Project a chunk's text and metadata onto the index payload schema."""
        meta = chunk.metadata
        return cls(
            user_id=meta.get("userId") or "",
            text=chunk.text,
            type=chunk.source_type,
            source=chunk.source,
            uploaded_at=meta.get("uploadedAt") or chunk.created_at,
            filename=meta.get("filename"),
            url=meta.get("url"),
            video_id=meta.get("videoId"),
            loc=meta.get("loc"),
        )

    def to_payload(self) -> dict[str, Any]:
        """Dump with wire names, leaving out unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
