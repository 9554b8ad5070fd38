from __future__ import annotations

from typing import List, Optional

from models.records import RawCsvDocument
from services.schema import DATA_FINAL_ROW, HEADINGS_ROW, CsvSchema


class CsvTransform:
    """Trim a raw export to its headings row plus the sensor data rows."""

    def __init__(self, schema: Optional[CsvSchema] = None) -> None:
        self.schema = schema or CsvSchema()

    def transform(self, document: RawCsvDocument) -> List[str]:
        self.schema.check(document)
        return list(document.lines[HEADINGS_ROW : DATA_FINAL_ROW + 1])
