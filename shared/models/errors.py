"""Error taxonomy of the ingestion and retrieval pipeline.

Every stage wraps failures of its external collaborators into one of these
classes with a stage-qualified message, so callers can map them to a
response without inspecting transport details.
"""


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class ExtractionError(PipelineError):
    """No usable text could be produced from a source."""


class EmptyDocumentError(ExtractionError):
    """The source parsed correctly but holds no content (e.g. a CSV without rows)."""


class InvalidURLError(ExtractionError):
    """The URL is malformed or does not match any supported shape."""


class InsufficientContentError(ExtractionError):
    """Extraction succeeded but produced too little text to be useful."""


class UnsupportedSourceError(ExtractionError):
    """No extraction strategy is registered for the requested source type."""


class CommandTimeoutError(ExtractionError):
    """An external command (OCR rasterizer, audio downloader, ...) ran past its timeout."""


class TranscriptionError(ExtractionError):
    """Speech-to-text failed or returned too little text."""


class IngestionError(PipelineError):
    """Embedding or index upsert failed while storing a source."""


class RetrievalError(PipelineError):
    """Embedding or index search failed while answering a query."""


class GenerationError(PipelineError):
    """The language model call failed (transport, quota, malformed reply)."""


class BackendError(Exception):
    """An external backend answered with an error status or could not be reached.

    Raised by the HTTP clients; the pipeline stages translate it into their own
    error class.
    """

    def __init__(self, message: str, url: str = "", status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
