"""Error taxonomy shared by ingestion, emission and retrieval."""

from __future__ import annotations

from datetime import datetime
from typing import Optional


class FootTrafficError(Exception):
    """Base class for every failure raised by this package."""


class InvalidArgumentError(FootTrafficError, ValueError):
    """A caller passed a malformed value, e.g. an hour with minutes set."""


class FormatError(FootTrafficError, ValueError):
    """A source file does not match the known fixed layout."""

    def __init__(self, file_name: str, line_index: int, line: Optional[str], reason: str) -> None:
        self.file_name = file_name
        self.line_index = line_index
        self.line = line
        self.reason = reason
        super().__init__(
            f"Not a valid Melbourne CSV file or format has changed: {file_name}\n"
            f"Line: {line_index}\n"
            f"Line content: {line if line is not None else '<missing>'}\n"
            f"Reason: {reason}"
        )


class NotFoundError(FootTrafficError, KeyError):
    """A sensor or reading that was asked for does not exist."""

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0]) if self.args else ""


class UnknownSensorError(NotFoundError):
    """A data row names a sensor outside the canonical set."""

    def __init__(self, sensor: str, file_name: Optional[str] = None, line_index: Optional[int] = None) -> None:
        self.sensor = sensor
        self.file_name = file_name
        self.line_index = line_index
        location = f" in {file_name} line {line_index}" if file_name is not None else ""
        super().__init__(f"Unknown sensor {sensor!r}{location}.")


class SyncError(FootTrafficError):
    """Sensor series do not cover the same contiguous hourly range."""

    def __init__(self, sensor: str, hour: Optional[datetime], reason: str) -> None:
        self.sensor = sensor
        self.hour = hour
        self.reason = reason
        when = hour.isoformat(timespec="minutes") if hour is not None else "n/a"
        super().__init__(
            f"Sensor times are not synchronised for {sensor!r} at {when}: {reason}. "
            "Ensure the data folder is not missing any CSV files."
        )


class SourceUnavailableError(FootTrafficError):
    """The remote data source could not deliver a daily file."""
