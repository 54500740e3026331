import csv
import io

from services.extraction.extractors.ExtractorInterface import ExtractorInterface
from shared.models.document import SourceDescriptor, SourceType, TextUnit
from shared.models.errors import EmptyDocumentError, ExtractionError


class CsvExtractor(ExtractorInterface):
    """One text unit per data row, rendered as "column: value" lines."""

    def get_source_types(self) -> list[SourceType]:
        return [SourceType.CSV]

    async def extract(self, source: SourceDescriptor) -> list[TextUnit]:
        text = self._require_content(source).decode("utf-8-sig", errors="replace")
        units: list[TextUnit] = []
        try:
            reader = csv.DictReader(io.StringIO(text))
            for row_index, row in enumerate(reader):
                lines = [
                    f"{column.strip()}: {(value or '').strip()}"
                    for column, value in row.items()
                    # cells beyond the header row end up under the None key
                    if column is not None
                ]
                if not any(value for value in row.values() if isinstance(value, str) and value.strip()):
                    continue
                units.append(TextUnit(text="\n".join(lines), metadata={"type": "csv", "row": row_index}))
        except csv.Error as exc:
            raise ExtractionError(f"Failed to process CSV '{source.identifier}': {exc}") from exc

        if not units:
            raise EmptyDocumentError(f"CSV '{source.identifier}' appears to be empty or has invalid format.")
        self.logging.info("Loaded %d rows from CSV '%s'.", len(units), source.identifier)
        return units
