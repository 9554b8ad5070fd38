"""Batch orchestration over a folder of daily files."""

from __future__ import annotations

import logging
import time
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional

from datastore.sensor_registry import SENSOR_NAMES, SensorRegistry
from models.errors import FormatError, SyncError, UnknownSensorError
from models.records import format_hour
from services.emitter import DatasetEmitter
from services.ingestor import FileIngestor
from services.source_client import SourceClient
from services.transform import CsvTransform
from settings import get_settings
from storage.csv_directory import CsvDirectory, CsvFileWriter, build_default_directory

logger = logging.getLogger(__name__)


class FootTrafficPipeline:
    """Coordinates retrieval, ingestion, conversion and emission.

    The pipeline keeps no dataset of its own: ``build_dataset`` returns a
    fresh registry that callers pass on to ``write_dataset``.
    """

    def __init__(
        self,
        directory: CsvDirectory,
        ingestor: Optional[FileIngestor] = None,
        emitter: Optional[DatasetEmitter] = None,
        transform: Optional[CsvTransform] = None,
        source: Optional[SourceClient] = None,
    ) -> None:
        self.directory = directory
        self.ingestor = ingestor or FileIngestor()
        self.emitter = emitter or DatasetEmitter()
        self.transform = transform or CsvTransform()
        self.source = source

    def build_dataset(self, names: Iterable[str] = SENSOR_NAMES) -> SensorRegistry:
        """Ingest every data file in the directory into a new registry."""
        start_time = time.perf_counter()
        registry = SensorRegistry(names)
        file_count = 0
        try:
            for file_date, document in self.directory.iter_documents():
                self.ingestor.ingest(document, file_date, registry)
                file_count += 1
        except FormatError as exc:
            _log_rejected_file(exc)
            raise
        except UnknownSensorError as exc:
            logger.warning(
                "Rejected daily file: unknown sensor",
                extra={"file_name": exc.file_name, "line_index": exc.line_index, "sensor": exc.sensor},
            )
            raise
        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "Built dataset from %d files in %d ms",
            file_count,
            elapsed_ms,
            extra={"reading_count": registry.reading_count()},
        )
        return registry

    def write_dataset(self, registry: SensorRegistry, destination: Path) -> int:
        try:
            return self.emitter.emit(registry, CsvFileWriter(Path(destination)))
        except SyncError as exc:
            logger.warning(
                "Wide table not written: %s",
                exc.reason,
                extra={
                    "file_name": str(destination),
                    "sensor": exc.sensor,
                    "hour": format_hour(exc.hour) if exc.hour is not None else None,
                },
            )
            raise

    def convert_directory(self, destination_dir: Path) -> int:
        """Write a trimmed copy of every data file into ``destination_dir``."""
        target = CsvDirectory(Path(destination_dir))
        count = 0
        for name in self.directory.list_data_files():
            try:
                lines = self.transform.transform(self.directory.read_document(name))
            except FormatError as exc:
                _log_rejected_file(exc)
                raise
            target.write_lines(name, lines)
            count += 1
        logger.info("Converted %d daily files", count, extra={"file_name": str(target.root_path)})
        return count

    def update(self) -> int:
        if self.source is None:
            raise RuntimeError("No source client configured for this pipeline.")
        return self.source.update()

    def close(self) -> None:
        if self.source is not None:
            self.source.close()


def _log_rejected_file(exc: FormatError) -> None:
    logger.warning(
        "Rejected daily file: %s",
        exc.reason,
        extra={"file_name": exc.file_name, "line_index": exc.line_index},
    )


@lru_cache
def build_default_pipeline(data_dir: Optional[str] = None) -> FootTrafficPipeline:
    """Factory that wires the pipeline from environment settings."""
    settings = get_settings()
    directory = build_default_directory(data_dir)
    source = SourceClient(
        directory=directory,
        url_prefix=settings.source_url,
        timeout=settings.http_timeout,
    )
    return FootTrafficPipeline(directory=directory, source=source)
