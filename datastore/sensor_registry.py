from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Iterator, Tuple

from models.errors import InvalidArgumentError, NotFoundError
from models.records import SensorSeries, ensure_hour, format_hour

# Kept as a closed list so a renamed or new upstream sensor is caught on ingest.
SENSOR_NAMES: Tuple[str, ...] = (
    "State Library",
    "Collins Place (South)",
    "Collins Place (North)",
    "Flagstaff Station",
    "Melbourne Central",
    "Town Hall (West)",
    "Bourke Street Mall (North)",
    "Bourke Street Mall (South)",
    "Australia on Collins",
    "Southern Cross Station",
    "Victoria Point",
    "New Quay",
    "Waterfront City",
    "Webb Bridge",
    "Princes Bridge",
    "Flinders St Station Underpass",
    "Sandridge Bridge",
    "Birrarung Marr",
    "QV Market-Elizabeth (West)",
    "Flinders St-Elizabeth St (East)",
    "Spencer St-Collins St (North)",
    "Spencer St-Collins St (South)",
    "Bourke St-Russell St (West)",
    "Convention/Exhibition Centre",
    "Chinatown-Swanston St (North)",
    "Chinatown-Lt Bourke St (South)",
    "QV Market-Peel St",
    "Vic Arts Centre",
    "Lonsdale St (South)",
    "Lygon St (West)",
    "Flinders St-Spring St (West)",
    "Flinders St-Spark Lane",
    "Alfred Place",
    "Queen Street (West)",
    "Lygon Street (East)",
    "Flinders St-Swanston St (West)",
    "Spring St-Lonsdale St (South)",
)


class SensorRegistry:
    """Fixed collection of sensor series for the city.

    The set of names is decided at construction and never grows; every
    series is owned here and handed out by name.
    """

    def __init__(self, names: Iterable[str] = SENSOR_NAMES) -> None:
        ordered = tuple(names)
        if not ordered:
            raise InvalidArgumentError("A sensor registry needs at least one sensor name.")
        self._series: Dict[str, SensorSeries] = {}
        for name in ordered:
            if not isinstance(name, str) or not name.strip():
                raise InvalidArgumentError(f"Invalid sensor name: {name!r}")
            if name in self._series:
                raise InvalidArgumentError(f"Duplicate sensor name: {name!r}")
            self._series[name] = SensorSeries(name)
        self._names = ordered

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    def series(self, name: str) -> SensorSeries:
        try:
            return self._series[name]
        except KeyError:
            raise NotFoundError(f"Sensor {name!r} is not a known sensor.") from None

    def total_count_at_hour(self, hour: datetime) -> int:
        """Sum the readings of every sensor at ``hour``."""
        ensure_hour(hour)
        total = 0
        for name in self._names:
            series = self._series[name]
            if hour not in series:
                raise NotFoundError(
                    f"Sensor {name!r} has no reading at {format_hour(hour)}."
                )
            total += series.get(hour)
        return total

    def reading_count(self) -> int:
        return sum(len(series) for series in self._series.values())

    def __contains__(self, name: object) -> bool:
        return name in self._series

    def __iter__(self) -> Iterator[SensorSeries]:
        for name in self._names:
            yield self._series[name]

    def __len__(self) -> int:
        return len(self._names)
