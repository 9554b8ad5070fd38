"""Merge every sensor series into one hour-aligned wide table."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Protocol, Sequence

from datastore.sensor_registry import SensorRegistry
from models.errors import InvalidArgumentError, SyncError
from models.records import SensorSeries, WideTableRow

logger = logging.getLogger(__name__)

HEADER_LABEL = "Sensor"
ONE_HOUR = timedelta(hours=1)


class LineWriter(Protocol):
    def write_lines(self, lines: Iterable[str]) -> None:
        ...


class DatasetEmitter:
    """Walks all series in lock-step over the first sensor's hourly range."""

    def build_rows(
        self,
        registry: SensorRegistry,
        ordered_names: Optional[Sequence[str]] = None,
    ) -> List[WideTableRow]:
        return self._rows_for(registry, self._resolve_names(registry, ordered_names))

    def _rows_for(self, registry: SensorRegistry, names: Sequence[str]) -> List[WideTableRow]:
        series = [registry.series(name) for name in names]

        reference = series[0]
        start, end = reference.first_hour, reference.last_hour
        if start is None or end is None:
            for other in series[1:]:
                if len(other):
                    raise SyncError(other.name, other.first_hour, "reference sensor has no readings")
            return []

        rows: List[WideTableRow] = []
        hour = start
        while hour <= end:
            counts = []
            for item in series:
                if hour not in item:
                    raise SyncError(item.name, hour, "missing reading")
                counts.append(item.get(hour))
            rows.append(WideTableRow(hour=hour, counts=tuple(counts)))
            hour += ONE_HOUR

        # Every hour in range is present, so any surplus lies outside it.
        for item in series:
            if len(item) != len(rows):
                raise SyncError(item.name, self._first_stray_hour(item, start, end), "reading outside range")
        return rows

    def emit(
        self,
        registry: SensorRegistry,
        writer: LineWriter,
        ordered_names: Optional[Sequence[str]] = None,
    ) -> int:
        """Write the header and one line per hour; return the row count."""
        names = self._resolve_names(registry, ordered_names)
        rows = self._rows_for(registry, names)
        header = ",".join([HEADER_LABEL, *names])
        writer.write_lines([header, *(row.to_line() for row in rows)])
        logger.info(
            "Emitted wide table for %d sensors", len(names), extra={"row_count": len(rows)}
        )
        return len(rows)

    @staticmethod
    def _resolve_names(registry: SensorRegistry, ordered_names: Optional[Sequence[str]]) -> List[str]:
        names = list(registry.names if ordered_names is None else ordered_names)
        if not names:
            raise InvalidArgumentError("At least one sensor name is required to emit a table.")
        if len(set(names)) != len(names):
            raise InvalidArgumentError("Sensor names passed to the emitter must be unique.")
        for name in names:
            registry.series(name)
        return names

    @staticmethod
    def _first_stray_hour(series: SensorSeries, start: datetime, end: datetime) -> Optional[datetime]:
        for hour in series.hours():
            if hour < start or hour > end:
                return hour
        return None
