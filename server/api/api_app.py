"""FastAPI application entry point for the NuroDesk API."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from server.api.routers.ChatRouter import chat_router
from server.api.routers.CollectionRouter import collection_router
from server.api.routers.UploadRouter import upload_router
from server.api.services.QueryService import QueryService
from server.models.responses import ErrorResponse
from services.chunking.TextChunker import TextChunker
from services.extraction.ExtractionService import ExtractionService
from services.ingestion.IngestionService import IngestionService
from services.retrieval.RetrievalService import RetrievalService
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.stt.STTClientManager import STTClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.errors import (
    ExtractionError,
    GenerationError,
    IngestionError,
    InvalidURLError,
    PipelineError,
    RetrievalError,
    UnsupportedSourceError,
)

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")

# most specific first, PipelineError is the catch-all
ERROR_STATUS_CODES: list[tuple[type[PipelineError], int]] = [
    (InvalidURLError, 400),
    (UnsupportedSourceError, 400),
    (ExtractionError, 422),
    (IngestionError, 502),
    (RetrievalError, 502),
    (GenerationError, 502),
    (PipelineError, 500),
]


def get_status_code(exc: PipelineError) -> int:
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown."""
    app.state.logging = setup_logging()
    app.state.config = HelperConfig(logger=app.state.logging)

    # Initialise clients
    embed_client = EmbedClientManager(helper_config=app.state.config).get_client()
    llm_client = LLMClientManager(helper_config=app.state.config).get_client()
    stt_client = STTClientManager(helper_config=app.state.config).get_client()
    rag_client = RAGClientManager(helper_config=app.state.config).get_client()
    clients = [embed_client, llm_client, stt_client, rag_client]
    for client in clients:
        await client.boot()

    # Health check and collection bootstrap
    await rag_client.do_healthcheck()
    await rag_client.do_ensure_collection(vector_size=embed_client.get_vector_size(), distance=embed_client.get_distance())
    info = await rag_client.do_get_collection_info()
    app.state.logging.info(
        "Collection %r: status=%s, points=%d, vector size=%s",
        info.name, info.status, info.points_count, info.vector_size,
    )

    # Wire up services
    retrieval_service = RetrievalService(
        helper_config=app.state.config,
        embed_client=embed_client,
        rag_client=rag_client,
    )
    app.state.rag_client = rag_client
    app.state.ingestion_service = IngestionService(
        helper_config=app.state.config,
        extraction_service=ExtractionService(helper_config=app.state.config, stt_client=stt_client),
        chunker=TextChunker(helper_config=app.state.config),
        embed_client=embed_client,
        rag_client=rag_client,
    )
    app.state.query_service = QueryService(
        helper_config=app.state.config,
        retrieval_service=retrieval_service,
        llm_client=llm_client,
    )

    app.state.logging.info("NuroDesk API ready.")
    yield

    # Shutdown
    for client in clients:
        await client.close()
    app.state.logging.info("NuroDesk API shut down.")


app = FastAPI(
    title="NuroDesk RAG API",
    description="Document ingestion and retrieval-augmented question answering over each user's own uploads.",
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PipelineError)
async def pipeline_exception_handler(request: Request, exc: PipelineError) -> JSONResponse:
    status_code = get_status_code(exc)
    request.app.state.logging.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=str(exc)).model_dump())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=ErrorResponse(message=str(exc.detail)).model_dump())


@app.get("/api/health", tags=["Health"])
async def health() -> JSONResponse:
    return JSONResponse(content={"status": "OK", "version": app_version})


app.include_router(upload_router)
app.include_router(chat_router)
app.include_router(collection_router)


# Server Start
if __name__ == "__main__":
    # start server
    import uvicorn
    logging.info("Starting NuroDesk API Server v%s from root dir: %s on port 8000...", app_version, os.getenv("ROOT_DIR", os.getcwd()))
    uvicorn.run(app, host="0.0.0.0", port=8000)
