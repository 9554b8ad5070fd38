from __future__ import annotations

import re
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from models.errors import InvalidArgumentError, NotFoundError
from models.records import RawCsvDocument
from settings import get_settings

# dd-mm-yyyy.csv; rejects a month-first ordering such as 02-13-2015.csv.
FILENAME_PATTERN = re.compile(r"^([0123][0-9])-(0[1-9]|1[012])-([0-9]{4})\.csv$")
FILENAME_DATE_FORMAT = "%d-%m-%Y"


def is_data_filename(name: str) -> bool:
    return FILENAME_PATTERN.match(name) is not None


def filename_for(day: date) -> str:
    return f"{day.day:02d}-{day.month:02d}-{day.year:04d}.csv"


def parse_date_from_filename(name: str) -> date:
    """Return the date encoded in a ``dd-mm-yyyy.csv`` filename."""
    base = Path(name).name
    match = FILENAME_PATTERN.match(base)
    if match is None:
        raise InvalidArgumentError(f"File is invalid: {base}")
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidArgumentError(f"File is invalid: {base} ({exc})") from exc


def latest_date(dates: Iterable[date]) -> date:
    candidates = list(dates)
    if not candidates:
        raise InvalidArgumentError("Date list cannot be empty!")
    return max(candidates)


class CsvDirectory:
    """Local folder of daily source files named ``dd-mm-yyyy.csv``."""

    def __init__(self, root_path: Path) -> None:
        self.root_path = Path(root_path)
        self.root_path.mkdir(parents=True, exist_ok=True)

    def list_data_files(self) -> List[str]:
        return sorted(
            path.name
            for path in self.root_path.iterdir()
            if path.is_file() and is_data_filename(path.name)
        )

    def dates(self) -> List[date]:
        found: List[date] = []
        for name in self.list_data_files():
            try:
                found.append(parse_date_from_filename(name))
            except InvalidArgumentError:
                # Matches the pattern but is not a calendar date; not ours.
                continue
        return found

    def latest_date(self) -> date:
        return latest_date(self.dates())

    def read_document(self, name: str) -> RawCsvDocument:
        path = self.root_path / name
        if not path.is_file():
            raise NotFoundError(f"File {name!r} not found in {self.root_path}.")
        return RawCsvDocument.from_bytes(name, path.read_bytes())

    def iter_documents(self) -> Iterator[Tuple[date, RawCsvDocument]]:
        """Yield ``(date, document)`` pairs in listing order, not date order."""
        for name in self.list_data_files():
            yield parse_date_from_filename(name), self.read_document(name)

    def write_bytes(self, name: str, data: bytes) -> Path:
        path = self.root_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def write_lines(self, name: str, lines: Iterable[str]) -> Path:
        path = self.root_path / name
        CsvFileWriter(path).write_lines(lines)
        return path


class CsvFileWriter:
    """Destination for emitted lines, written in one go."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def write_lines(self, lines: Iterable[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8", newline="") as handle:
            for line in lines:
                handle.write(line)
                handle.write("\n")


@lru_cache
def build_default_directory(root_path: Optional[str] = None) -> CsvDirectory:
    settings = get_settings()
    root = settings.data_dir if root_path is None else root_path
    return CsvDirectory(Path(root))
