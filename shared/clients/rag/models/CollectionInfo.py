from pydantic import BaseModel


class CollectionInfo(BaseModel):
    """Summary of the index collection as reported by the backend."""

    name: str
    status: str = "unknown"
    points_count: int = 0
    vector_size: int | None = None
    distance: str | None = None
