from __future__ import annotations

from datetime import date, datetime

import pytest

from datastore.sensor_registry import SENSOR_NAMES, SensorRegistry
from models.errors import FormatError, UnknownSensorError
from models.records import RawCsvDocument
from services.ingestor import FileIngestor
from services.schema import ANCHOR_ROW, DATA_FINAL_ROW, DATA_START_ROW, TOTAL_ROW
from tests.source_files import build_source_lines, build_source_text, file_order


def _document(day: date, **kwargs) -> RawCsvDocument:
    name = day.strftime("%d-%m-%Y.csv")
    return RawCsvDocument.from_text(name, build_source_text(day, **kwargs))


@pytest.fixture()
def registry() -> SensorRegistry:
    return SensorRegistry()


def test_ingest_writes_every_hour_of_every_sensor(registry: SensorRegistry) -> None:
    day = date(2015, 3, 17)

    written = FileIngestor().ingest(_document(day), day, registry)

    assert written == 24 * len(SENSOR_NAMES)
    for series in registry:
        assert series.first_hour == datetime(2015, 3, 17, 0)
        assert series.last_hour == datetime(2015, 3, 17, 23)
        assert len(series) == 24


def test_ingest_maps_fields_to_consecutive_hours(registry: SensorRegistry) -> None:
    day = date(2015, 3, 17)
    waterfront = [46] * 24
    marr = list(range(100, 124))

    FileIngestor().ingest(
        _document(day, values={"Waterfront City": waterfront, "Birrarung Marr": marr}),
        day,
        registry,
    )

    assert registry.series("Waterfront City").get(datetime(2015, 3, 17, 7)) == 46
    assert registry.series("Birrarung Marr").get(datetime(2015, 3, 17, 0)) == 100
    assert registry.series("Birrarung Marr").get(datetime(2015, 3, 17, 17)) == 117
    assert registry.series("Birrarung Marr").get(datetime(2015, 3, 17, 23)) == 123


def test_not_available_token_becomes_zero(registry: SensorRegistry) -> None:
    day = date(2015, 3, 18)
    values = [5] * 24
    values[3] = "N/A"

    FileIngestor().ingest(_document(day, values={"Webb Bridge": values}), day, registry)

    assert registry.series("Webb Bridge").get(datetime(2015, 3, 18, 3)) == 0
    assert registry.series("Webb Bridge").get(datetime(2015, 3, 18, 4)) == 5


@pytest.mark.parametrize("bad_value", ["12.5", "abc", "", "-3", "1_000", "+5", "１２"])
def test_non_integer_counts_are_format_errors(registry: SensorRegistry, bad_value: str) -> None:
    day = date(2015, 3, 17)
    values = [1] * 24
    values[10] = bad_value

    with pytest.raises(FormatError) as excinfo:
        FileIngestor().ingest(_document(day, values={"New Quay": values}), day, registry)

    expected_line = DATA_START_ROW + file_order().index("New Quay")
    assert excinfo.value.line_index == expected_line
    assert registry.reading_count() == 0


def test_wrong_number_of_hourly_values_is_a_format_error(registry: SensorRegistry) -> None:
    day = date(2015, 3, 17)

    with pytest.raises(FormatError) as excinfo:
        FileIngestor().ingest(_document(day, values={"Victoria Point": [1] * 23}), day, registry)

    assert "expected 24 hourly values" in str(excinfo.value)


def test_unknown_sensor_is_rejected_without_creating_series(registry: SensorRegistry) -> None:
    day = date(2015, 3, 17)
    lines = build_source_lines(day)
    renamed_index = DATA_START_ROW
    original = lines[renamed_index].split(",", 1)[0]
    lines[renamed_index] = lines[renamed_index].replace(original, "Docklands Drive", 1)

    with pytest.raises(UnknownSensorError) as excinfo:
        FileIngestor().ingest(RawCsvDocument("17-03-2015.csv", lines), day, registry)

    assert excinfo.value.sensor == "Docklands Drive"
    assert excinfo.value.line_index == renamed_index
    assert "Docklands Drive" not in registry
    assert registry.reading_count() == 0


def test_anchor_mismatch_is_rejected_even_if_rows_are_well_formed(registry: SensorRegistry) -> None:
    day = date(2015, 3, 17)
    lines = build_source_lines(day)
    lines[ANCHOR_ROW], lines[ANCHOR_ROW + 1] = lines[ANCHOR_ROW + 1], lines[ANCHOR_ROW]

    with pytest.raises(FormatError) as excinfo:
        FileIngestor().ingest(RawCsvDocument("17-03-2015.csv", lines), day, registry)

    assert excinfo.value.line_index == ANCHOR_ROW


def test_totals_row_and_trailing_lines_are_not_ingested(registry: SensorRegistry) -> None:
    day = date(2015, 3, 17)
    lines = build_source_lines(day)
    lines[TOTAL_ROW] = "Total," + ",".join(["not-a-number"] * 24)
    lines.append("Some footnote,with,commas")

    written = FileIngestor().ingest(RawCsvDocument("17-03-2015.csv", lines), day, registry)

    assert written == 24 * (DATA_FINAL_ROW - DATA_START_ROW + 1)


def test_files_can_be_ingested_out_of_date_order(registry: SensorRegistry) -> None:
    ingestor = FileIngestor()
    later, earlier = date(2015, 3, 18), date(2015, 3, 17)

    ingestor.ingest(_document(later, default=2), later, registry)
    ingestor.ingest(_document(earlier, default=1), earlier, registry)

    series = registry.series("State Library")
    assert series.first_hour == datetime(2015, 3, 17, 0)
    assert series.last_hour == datetime(2015, 3, 18, 23)
    assert series.get(datetime(2015, 3, 17, 23)) == 1
    assert series.get(datetime(2015, 3, 18, 0)) == 2


def test_reingesting_a_day_overwrites_previous_counts(registry: SensorRegistry) -> None:
    ingestor = FileIngestor()
    day = date(2015, 3, 17)

    ingestor.ingest(_document(day, default=1), day, registry)
    ingestor.ingest(_document(day, default=7), day, registry)

    assert registry.reading_count() == 24 * len(SENSOR_NAMES)
    assert registry.series("Alfred Place").get(datetime(2015, 3, 17, 12)) == 7
