"""Chat router. Answers questions from the caller's own documents."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from server.models.requests import ChatRequest
from server.models.responses import ChatResponse
from shared.dependencies.auth import get_user_id, verify_api_key
from shared.models.document import utc_now_iso

chat_router = APIRouter()


@chat_router.post(
    "/api/chat",
    dependencies=[Depends(verify_api_key)],
    tags=["Chat"],
)
async def handle_chat(request: Request, body: ChatRequest, user_id: str = Depends(get_user_id)) -> JSONResponse:
    """Handle a natural language question.

    The X-User-Id header determines which documents may be used. This filter
    is enforced unconditionally by the retrieval service.

    Args:
        request (Request): The incoming FastAPI request (carries app state).
        body (ChatRequest): The question and earlier conversation turns.
        user_id (str): The caller's user id.

    Returns:
        JSONResponse: The answer, its sources and a timestamp.

    Raises:
        HTTPException: 400 if the message is empty.
    """
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="No message provided")

    request.app.state.logging.info("Chat message received for user %s: %r", user_id, body.message[:80])
    answer = await request.app.state.query_service.do_query(body.message, user_id=user_id, history=body.history)

    result = ChatResponse(answer=answer.answer, sources=answer.sources, timestamp=utc_now_iso())
    return JSONResponse(content=result.model_dump(exclude_none=True))
