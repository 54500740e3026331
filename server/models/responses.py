from pydantic import BaseModel

from shared.models.search import SourceReference


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    documentCount: int
    filename: str | None = None
    url: str | None = None


class ChatResponse(BaseModel):
    success: bool = True
    answer: str
    sources: list[SourceReference]
    timestamp: str


class CollectionInfoResponse(BaseModel):
    success: bool = True
    collection: str
    status: str
    pointsCount: int
    vectorSize: int | None = None
    distance: str | None = None


class PurgeResponse(BaseModel):
    success: bool = True
    message: str
    deletedCount: int


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
