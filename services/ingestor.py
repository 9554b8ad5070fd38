"""Parse one daily source file into the sensor registry."""

from __future__ import annotations

import csv
import logging
import re
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from datastore.sensor_registry import SensorRegistry
from models.errors import FormatError, UnknownSensorError
from models.records import RawCsvDocument
from services.schema import (
    DATA_FINAL_ROW,
    DATA_START_ROW,
    HOURS_PER_DAY,
    MISSING_VALUE,
    CsvSchema,
)

logger = logging.getLogger(__name__)

# ASCII digits only; int() alone would also take "1_000", "+5" or non-ASCII digits.
COUNT_PATTERN = re.compile(r"-?[0-9]+")


class FileIngestor:
    """Writes the 24 hourly counts of every data row into the registry."""

    def __init__(self, schema: Optional[CsvSchema] = None) -> None:
        self.schema = schema or CsvSchema()

    def ingest(self, document: RawCsvDocument, file_date: date, registry: SensorRegistry) -> int:
        """Ingest ``document`` as the readings of ``file_date``.

        Returns the number of hourly readings written. The whole file is
        parsed before anything is written, so a failing file leaves the
        registry untouched.
        """
        self.schema.check(document)

        midnight = datetime.combine(file_date, time())
        rows: List[Tuple[str, List[int]]] = []
        for line_index in range(DATA_START_ROW, DATA_FINAL_ROW + 1):
            line = document.lines[line_index]
            sensor, counts = self._parse_row(document.name, line_index, line)
            if sensor not in registry:
                raise UnknownSensorError(sensor, file_name=document.name, line_index=line_index)
            rows.append((sensor, counts))

        written = 0
        for sensor, counts in rows:
            series = registry.series(sensor)
            for offset, count in enumerate(counts):
                series.set(midnight + timedelta(hours=offset), count)
                written += 1

        logger.info(
            "Ingested daily file",
            extra={
                "file_name": document.name,
                "file_date": file_date.isoformat(),
                "reading_count": written,
            },
        )
        return written

    @staticmethod
    def _parse_row(file_name: str, line_index: int, line: str) -> Tuple[str, List[int]]:
        fields = next(csv.reader([line]), [])
        if not fields or not fields[0].strip():
            raise FormatError(file_name, line_index, line, "missing sensor name")

        sensor = fields[0].strip()
        values = fields[1:]
        if len(values) != HOURS_PER_DAY:
            raise FormatError(
                file_name,
                line_index,
                line,
                f"expected {HOURS_PER_DAY} hourly values, found {len(values)}",
            )

        counts: List[int] = []
        for raw in values:
            candidate = raw.strip()
            if candidate == MISSING_VALUE:
                counts.append(0)
                continue
            if COUNT_PATTERN.fullmatch(candidate) is None:
                raise FormatError(file_name, line_index, line, f"invalid count {raw!r}")
            count = int(candidate)
            if count < 0:
                raise FormatError(file_name, line_index, line, f"negative count {raw!r}")
            counts.append(count)
        return sensor, counts
