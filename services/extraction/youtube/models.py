from pydantic import BaseModel, Field


class VideoChapter(BaseModel):
    start_time: float = 0
    title: str = "Untitled"


class VideoMetadata(BaseModel):
    """Best-effort video metadata. Every field may be empty when no lookup succeeded."""

    title: str = ""
    channel: str = ""
    description: str = ""
    duration: float = 0
    upload_date: str = ""
    chapters: list[VideoChapter] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_ytdlp(cls, data: dict) -> "VideoMetadata":
        """Build from the JSON printed by `yt-dlp --dump-json`."""
        return cls(
            title=data.get("title") or "",
            channel=data.get("uploader") or data.get("channel") or "",
            description=data.get("description") or "",
            duration=data.get("duration") or 0,
            upload_date=data.get("upload_date") or "",
            chapters=[
                VideoChapter(start_time=c.get("start_time") or 0, title=c.get("title") or "Untitled")
                for c in (data.get("chapters") or [])
            ],
            tags=[str(t) for t in (data.get("tags") or [])],
        )

    @classmethod
    def from_oembed(cls, data: dict) -> "VideoMetadata":
        return cls(title=data.get("title") or "", channel=data.get("author_name") or "")
