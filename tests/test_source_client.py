from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path
from typing import List

import httpx
import pytest

from models.errors import InvalidArgumentError, SourceUnavailableError
from services.source_client import EARLIEST_DATE, SourceClient
from storage.csv_directory import CsvDirectory

PREFIX = "http://example.test/api/bydatecsv/"
TODAY = date(2015, 3, 20)


class RecordingSource:
    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requested: List[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requested.append(str(request.url))
        day = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(self.status_code, text=f"CITY OF MELBOURNE\n{day}\n")


@pytest.fixture()
def source() -> RecordingSource:
    return RecordingSource()


def _client(tmp_path: Path, source: RecordingSource, today: date = TODAY) -> SourceClient:
    http = httpx.Client(transport=httpx.MockTransport(source))
    return SourceClient(
        directory=CsvDirectory(tmp_path),
        url_prefix=PREFIX,
        client=http,
        today=lambda: today,
    )


def test_url_for_uses_day_first_date(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)

    assert client.url_for(date(2014, 3, 17)) == PREFIX + "17-03-2014"


def test_url_prefix_gets_trailing_slash(tmp_path: Path) -> None:
    client = SourceClient(directory=CsvDirectory(tmp_path), url_prefix="http://example.test/csv")
    try:
        assert client.url_for(date(2014, 3, 17)) == "http://example.test/csv/17-03-2014"
    finally:
        client.close()


def test_download_day_writes_named_file(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)

    path = client.download_day(date(2015, 3, 18))

    assert path == tmp_path / "18-03-2015.csv"
    assert path.read_text() == "CITY OF MELBOURNE\n18-03-2015\n"
    assert source.requested == [PREFIX + "18-03-2015"]


def test_download_day_surfaces_http_errors(tmp_path: Path) -> None:
    client = _client(tmp_path, RecordingSource(status_code=400))

    with pytest.raises(SourceUnavailableError) as excinfo:
        client.download_day(date(2015, 3, 18))

    assert "400" in str(excinfo.value)
    assert not (tmp_path / "18-03-2015.csv").exists()


def test_download_range_is_end_exclusive(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)

    count = client.download_range(date(2015, 3, 17), TODAY)

    assert count == 3
    assert sorted(p.name for p in tmp_path.iterdir()) == [
        "17-03-2015.csv",
        "18-03-2015.csv",
        "19-03-2015.csv",
    ]


def test_download_range_rejects_start_before_earliest(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)

    with pytest.raises(InvalidArgumentError, match="earliest"):
        client.download_range(EARLIEST_DATE - timedelta(days=1), TODAY)


def test_download_range_rejects_future_dates(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)

    with pytest.raises(InvalidArgumentError, match="today"):
        client.download_range(TODAY, TODAY + timedelta(days=2))
    with pytest.raises(InvalidArgumentError, match="today"):
        client.download_range(TODAY + timedelta(days=1), TODAY + timedelta(days=1))


def test_download_range_rejects_empty_range(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)

    with pytest.raises(InvalidArgumentError, match="less than"):
        client.download_range(TODAY, TODAY - timedelta(days=1))
    with pytest.raises(InvalidArgumentError, match="less than"):
        client.download_range(TODAY, TODAY)
    assert source.requested == []


def test_update_fetches_days_after_latest_file(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)
    existing = tmp_path / "16-03-2015.csv"
    existing.write_text("original")
    (tmp_path / "15-03-2015.csv").write_text("original")

    added = client.update()

    assert added == 3
    assert source.requested == [PREFIX + "17-03-2015", PREFIX + "18-03-2015", PREFIX + "19-03-2015"]
    assert existing.read_text() == "original"


def test_update_when_up_to_date_downloads_nothing(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)
    (tmp_path / "19-03-2015.csv").write_text("original")

    assert client.update() == 0
    assert source.requested == []


def test_update_on_empty_directory_starts_at_earliest_date(tmp_path: Path, source: RecordingSource) -> None:
    today = EARLIEST_DATE + timedelta(days=4)
    client = _client(tmp_path, source, today=today)

    assert client.update() == 4
    assert source.requested[0] == PREFIX + "09-10-2013"


def test_update_rejects_files_dated_today_or_later(tmp_path: Path, source: RecordingSource) -> None:
    client = _client(tmp_path, source)
    (tmp_path / "20-03-2015.csv").write_text("original")

    with pytest.raises(InvalidArgumentError):
        client.update()
