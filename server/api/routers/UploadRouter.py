"""Upload router. Stores files and URLs in the caller's document index."""

from enum import Enum

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from server.models.requests import UrlUploadRequest
from server.models.responses import UploadResponse
from shared.dependencies.auth import get_user_id, verify_api_key
from shared.models.document import SourceDescriptor, SourceType

upload_router = APIRouter(prefix="/api/upload", dependencies=[Depends(verify_api_key)], tags=["Upload"])


class FileUploadType(str, Enum):
    pdf = "pdf"
    csv = "csv"
    txt = "txt"


@upload_router.post("/url")
async def upload_url(request: Request, body: UrlUploadRequest, user_id: str = Depends(get_user_id)) -> JSONResponse:
    """Ingest a web page or YouTube video.

    Args:
        request (Request): The incoming FastAPI request (carries app state).
        body (UrlUploadRequest): The URL to ingest.
        user_id (str): The caller's user id.

    Returns:
        JSONResponse: Number of chunks stored and the URL.
    """
    url = body.url.strip()
    if not url:
        raise HTTPException(status_code=400, detail="URL is required")

    request.app.state.logging.info("URL upload received for user %s: %s", user_id, url)
    source = SourceDescriptor(source_type=SourceType.URL, identifier=url)
    count = await request.app.state.ingestion_service.ingest(source, user_id=user_id)

    result = UploadResponse(message="URL processed successfully", documentCount=count, url=url)
    return JSONResponse(content=result.model_dump(exclude_none=True))


@upload_router.post("/{file_type}")
async def upload_file(
    request: Request,
    file_type: FileUploadType,
    file: UploadFile | None = File(default=None),
    user_id: str = Depends(get_user_id),
) -> JSONResponse:
    """Ingest an uploaded PDF, CSV or TXT file.

    The file extension must match the route (e.g. a .csv file on /api/upload/csv).

    Returns:
        JSONResponse: Number of chunks stored and the original filename.

    Raises:
        HTTPException: 400 when no file was sent, the file type is not allowed or
            the file exceeds UPLOAD_MAX_FILE_MB.
    """
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    try:
        detected_type = SourceType.from_filename(file.filename)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if detected_type.value != file_type.value:
        raise HTTPException(status_code=400, detail=f"File type '.{detected_type.value}' does not match upload type '{file_type.value}'.")

    max_mb = request.app.state.config.get_number_val("UPLOAD_MAX_FILE_MB", default=50)
    content = await file.read()
    if len(content) > max_mb * 1024 * 1024:
        raise HTTPException(status_code=400, detail=f"File size too large. Maximum size is {max_mb}MB.")

    request.app.state.logging.info("%s upload received for user %s: %s (%d bytes)", file_type.value.upper(), user_id, file.filename, len(content))
    source = SourceDescriptor(source_type=detected_type, identifier=file.filename, content=content)
    count = await request.app.state.ingestion_service.ingest(source, user_id=user_id)

    result = UploadResponse(
        message=f"{file_type.value.upper()} processed successfully",
        documentCount=count,
        filename=file.filename,
    )
    return JSONResponse(content=result.model_dump(exclude_none=True))
