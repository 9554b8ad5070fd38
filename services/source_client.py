"""Download daily CSV exports from the City of Melbourne data source."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Callable, Optional

import httpx

from models.errors import InvalidArgumentError, SourceUnavailableError
from settings import DEFAULT_SOURCE_URL
from storage.csv_directory import CsvDirectory, filename_for

logger = logging.getLogger(__name__)

# Earliest day the source actually serves data for.
EARLIEST_DATE = date(2013, 10, 9)
DEFAULT_TIMEOUT = 30.0


class SourceClient:
    """HTTP client that fills a ``CsvDirectory`` with daily files."""

    def __init__(
        self,
        directory: CsvDirectory,
        url_prefix: str = DEFAULT_SOURCE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.directory = directory
        self.url_prefix = url_prefix if url_prefix.endswith("/") else f"{url_prefix}/"
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout), follow_redirects=True)
        self._today = today

    def close(self) -> None:
        self._client.close()

    def url_for(self, day: date) -> str:
        return self.url_prefix + filename_for(day)[: -len(".csv")]

    def download_day(self, day: date) -> Path:
        url = self.url_for(day)
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailableError(
                f"Server returned HTTP response code: {exc.response.status_code} for URL: {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"Failed to download {url}: {exc}") from exc

        path = self.directory.write_bytes(filename_for(day), response.content)
        logger.info(
            "Downloaded daily file",
            extra={"url": url, "status": response.status_code, "file_name": path.name},
        )
        return path

    def download_range(self, start: date, end: date) -> int:
        """Download every day from ``start`` (inclusive) to ``end`` (exclusive)."""
        today = self._today()
        if start < EARLIEST_DATE:
            raise InvalidArgumentError(
                f"From date must be equal to or after the earliest date ({EARLIEST_DATE.isoformat()})"
            )
        if start > today or end > today + timedelta(days=1):
            raise InvalidArgumentError(
                "From date must not be after today, "
                "to date must be no more than 1 day after today"
            )
        if start > end - timedelta(days=1):
            raise InvalidArgumentError("From date must be less than to date")

        day = start
        downloaded = 0
        while day < end:
            self.download_day(day)
            downloaded += 1
            day += timedelta(days=1)
        return downloaded

    def update(self) -> int:
        """Download every day missing after the newest local file, up to yesterday."""
        today = self._today()
        existing = self.directory.dates()
        if not existing:
            start = EARLIEST_DATE
        else:
            latest = max(existing)
            if latest >= today:
                raise InvalidArgumentError(
                    f"Found a file dated today or later: {filename_for(latest)}"
                )
            start = latest + timedelta(days=1)

        if start >= today:
            logger.info("Data directory already up to date", extra={"days": 0})
            return 0

        downloaded = self.download_range(start, today)
        logger.info("Updated data directory", extra={"days": downloaded})
        return downloaded
