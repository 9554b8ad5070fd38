"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Tuple

from models.errors import FormatError, InvalidArgumentError, NotFoundError


def ensure_hour(hour: datetime) -> datetime:
    """Reject timestamps that are not exactly on the hour."""
    if not isinstance(hour, datetime):
        raise InvalidArgumentError(f"Expected a datetime, got {type(hour).__name__}: {hour!r}")
    if hour.minute or hour.second or hour.microsecond:
        raise InvalidArgumentError(
            f"Datetime must be exactly to the hour (00 mins, 00 seconds): {hour.isoformat()}"
        )
    return hour


def format_hour(hour: datetime) -> str:
    return hour.isoformat(timespec="minutes")


class SensorSeries:
    """Hourly counts of one sensor, kept in time order."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._counts: Dict[datetime, int] = {}
        self._ordered: Optional[List[datetime]] = []

    def get(self, hour: datetime) -> int:
        ensure_hour(hour)
        try:
            return self._counts[hour]
        except KeyError:
            raise NotFoundError(
                f"Sensor {self.name!r} has no reading at {format_hour(hour)}."
            ) from None

    def set(self, hour: datetime, count: int) -> None:
        ensure_hour(hour)
        if isinstance(count, bool) or not isinstance(count, int):
            raise InvalidArgumentError(f"Count must be an integer, got {count!r}")
        if count < 0:
            raise InvalidArgumentError(f"Count must not be negative, got {count}")
        if hour not in self._counts:
            # Keys arrive in file order, not time order; re-sort lazily.
            self._ordered = None
        self._counts[hour] = count

    def hours(self) -> List[datetime]:
        if self._ordered is None:
            self._ordered = sorted(self._counts)
        return list(self._ordered)

    def items(self) -> Iterator[Tuple[datetime, int]]:
        for hour in self.hours():
            yield hour, self._counts[hour]

    @property
    def first_hour(self) -> Optional[datetime]:
        ordered = self.hours()
        return ordered[0] if ordered else None

    @property
    def last_hour(self) -> Optional[datetime]:
        ordered = self.hours()
        return ordered[-1] if ordered else None

    def __contains__(self, hour: object) -> bool:
        return hour in self._counts

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"SensorSeries(name={self.name!r}, readings={len(self)})"


@dataclass(frozen=True)
class WideTableRow:
    """One emitted hour: counts for every sensor in canonical order."""

    hour: datetime
    counts: Tuple[int, ...]

    def to_line(self) -> str:
        return ",".join([format_hour(self.hour), *(str(count) for count in self.counts)])


@dataclass(slots=True)
class RawCsvDocument:
    """Lines of one source file, indexed from zero."""

    name: str
    lines: List[str] = field(default_factory=list)

    @classmethod
    def from_text(cls, name: str, text: str) -> "RawCsvDocument":
        return cls(name=name, lines=text.splitlines())

    @classmethod
    def from_bytes(cls, name: str, data: bytes, encoding: str = "utf-8-sig") -> "RawCsvDocument":
        try:
            text = data.decode(encoding)
        except UnicodeDecodeError as exc:
            line_index = data.count(b"\n", 0, exc.start)
            raise FormatError(name, line_index, None, f"not valid {encoding} text") from exc
        return cls.from_text(name, text)

    def __len__(self) -> int:
        return len(self.lines)
