"""Pydantic models for retrieval results and answers."""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field


class ConversationTurn(BaseModel):
    """One earlier message of the conversation, supplied by the caller."""

    role: Literal["user", "assistant"]
    text: str = Field(default="", validation_alias=AliasChoices("text", "content"))


class RetrievedDocument(BaseModel):
    """Read-only projection of an index point plus its similarity score.

    Lives only for the duration of one query.
    """

    id: str
    text: str
    score: float
    type: str = "unknown"
    source: str | None = None
    filename: str | None = None
    url: str | None = None
    video_id: str | None = None
    loc: dict[str, Any] | None = None
    uploaded_at: str | None = None
    user_id: str | None = None

    @classmethod
    def from_hit(cls, hit: dict) -> "RetrievedDocument":
        """Build a document from a raw index search hit ({"id", "score", "payload"})."""
        payload = hit.get("payload") or {}
        return cls(
            id=str(hit.get("id", "")),
            text=payload.get("text") or "",
            score=float(hit.get("score") or 0.0),
            type=payload.get("type") or "unknown",
            source=payload.get("source") or payload.get("filename") or payload.get("url"),
            filename=payload.get("filename"),
            url=payload.get("url"),
            video_id=payload.get("videoId"),
            loc=payload.get("loc"),
            uploaded_at=payload.get("uploadedAt"),
            user_id=payload.get("userId"),
        )

    @property
    def page(self) -> int | None:
        if not self.loc:
            return None
        return self.loc.get("pageNumber")


class SourceReference(BaseModel):
    """A cited source as returned to the caller next to the answer."""

    name: str
    type: str
    page: int | None = None
    videoId: str | None = None


class Answer(BaseModel):
    """Generated answer with the top retrieved sources."""

    answer: str
    sources: list[SourceReference] = Field(default_factory=list)
