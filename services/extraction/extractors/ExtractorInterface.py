from abc import ABC, abstractmethod

from shared.helper.HelperConfig import HelperConfig
from shared.models.document import SourceDescriptor, SourceType, TextUnit
from shared.models.errors import EmptyDocumentError


class ExtractorInterface(ABC):
    """One extraction strategy: turns a source of a given type into text units."""

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config

    ##########################################
    ################ GETTER ##################
    ##########################################

    @abstractmethod
    def get_source_types(self) -> list[SourceType]:
        """
        Returns the source types this strategy handles.
        """
        pass

    def _require_content(self, source: SourceDescriptor) -> bytes:
        """
        Returns the raw bytes of a file source.

        Raises:
            EmptyDocumentError: If the upload carries no bytes.
        """
        if not source.content:
            raise EmptyDocumentError(f"Uploaded file '{source.identifier}' is empty.")
        return source.content

    ##########################################
    ################ CORE ####################
    ##########################################

    @abstractmethod
    async def extract(self, source: SourceDescriptor) -> list[TextUnit]:
        """
        Converts the source into text units with source-type metadata.

        Args:
            source (SourceDescriptor): The uploaded file or URL.

        Returns:
            list[TextUnit]: The extracted units, in source order.

        Raises:
            ExtractionError: If no usable text can be produced.
        """
        pass
