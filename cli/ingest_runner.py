"""Ingest runner entry point.

Stores one file or URL in the document index for a given user, using the
same clients and services as the API server. Useful for backfills and
smoke tests.

Usage:
    python -m cli.ingest_runner --user-id U --file report.pdf
    python -m cli.ingest_runner --user-id U --url https://youtu.be/VIDEO_ID
"""

import argparse
import asyncio
import os
import sys

from services.chunking.TextChunker import TextChunker
from services.extraction.ExtractionService import ExtractionService
from services.ingestion.IngestionService import IngestionService
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.rag.RAGClientManager import RAGClientManager
from shared.clients.stt.STTClientManager import STTClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from shared.models.document import SourceDescriptor, SourceType
from shared.models.errors import PipelineError


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest one file or URL into the NuroDesk document index.")
    parser.add_argument("--user-id", required=True, help="Opaque id of the owning user")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--file", help="Path to a .pdf, .csv or .txt file")
    target.add_argument("--url", help="Web page or YouTube URL")
    parser.add_argument(
        "--type",
        choices=[t.value for t in (SourceType.PDF, SourceType.CSV, SourceType.TXT)],
        help="File type (default: from the file extension)",
    )
    return parser.parse_args(argv)


def build_source(args: argparse.Namespace) -> SourceDescriptor:
    """Build the source descriptor from the command-line arguments.

    Raises:
        ValueError: If the file type cannot be determined.
        OSError: If the file cannot be read.
    """
    if args.url:
        return SourceDescriptor(source_type=SourceType.URL, identifier=args.url)
    source_type = SourceType(args.type) if args.type else SourceType.from_filename(args.file)
    with open(args.file, "rb") as fh:
        content = fh.read()
    return SourceDescriptor(source_type=source_type, identifier=os.path.basename(args.file), content=content)


async def main(argv: list[str] | None = None) -> int:
    """Run one ingestion. Returns the process exit code."""
    args = parse_args(argv)
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    try:
        source = build_source(args)
    except (ValueError, OSError) as e:
        logger.error("Cannot read source: %s", e)
        return 2

    embed_client = EmbedClientManager(helper_config=config).get_client()
    stt_client = STTClientManager(helper_config=config).get_client()
    rag_client = RAGClientManager(helper_config=config).get_client()
    clients = [embed_client, stt_client, rag_client]

    try:
        # boot all clients. The index is required, if it fails to boot there is nothing to ingest into
        for client in clients:
            await client.boot()
        try:
            await rag_client.do_healthcheck()
            await rag_client.do_ensure_collection(vector_size=embed_client.get_vector_size(), distance=embed_client.get_distance())
        except Exception as e:
            logger.error("Error booting RAG client %s: %s. Aborting.", rag_client.get_engine_name(), e)
            return 1

        ingestion_service = IngestionService(
            helper_config=config,
            extraction_service=ExtractionService(helper_config=config, stt_client=stt_client),
            chunker=TextChunker(helper_config=config),
            embed_client=embed_client,
            rag_client=rag_client,
        )
        try:
            count = await ingestion_service.ingest(source, user_id=args.user_id)
        except PipelineError as e:
            logger.error("Ingestion of '%s' failed: %s", source.identifier, e)
            return 1
        logger.info("Stored %d chunk(s) from '%s' for user %s.", count, source.identifier, args.user_id)
        return 0
    finally:
        for client in clients:
            await client.close()


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
