from pydantic import BaseModel, Field

from shared.models.search import ConversationTurn


class UrlUploadRequest(BaseModel):
    url: str = ""


class ChatRequest(BaseModel):
    message: str = ""
    history: list[ConversationTurn] = Field(default_factory=list)
