"""Collection router. Index status and per-user purge."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from server.models.responses import CollectionInfoResponse, PurgeResponse
from shared.dependencies.auth import get_user_id, verify_api_key
from shared.models.errors import RetrievalError

collection_router = APIRouter(prefix="/api/collection", dependencies=[Depends(verify_api_key)], tags=["Collection"])


@collection_router.get("/info")
async def get_collection_info(request: Request) -> JSONResponse:
    """Return status, points count and vector configuration of the shared collection."""
    try:
        info = await request.app.state.rag_client.do_get_collection_info()
    except Exception as exc:
        request.app.state.logging.error("Collection info request failed: %s", exc)
        raise RetrievalError(f"Collection info request failed: {exc}") from exc

    result = CollectionInfoResponse(
        collection=info.name,
        status=info.status,
        pointsCount=info.points_count,
        vectorSize=info.vector_size,
        distance=info.distance,
    )
    return JSONResponse(content=result.model_dump())


@collection_router.delete("/documents")
async def purge_documents(request: Request, user_id: str = Depends(get_user_id)) -> JSONResponse:
    """Delete all documents of the calling user. Other users' documents are untouched."""
    deleted = await request.app.state.ingestion_service.purge_user_documents(user_id)
    result = PurgeResponse(message=f"Deleted {deleted} document chunk(s).", deletedCount=deleted)
    return JSONResponse(content=result.model_dump())
