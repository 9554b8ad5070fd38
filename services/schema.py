"""Positional checks for the fixed-layout City of Melbourne export."""

from __future__ import annotations

from models.errors import FormatError, InvalidArgumentError
from models.records import RawCsvDocument

HEADINGS_ROW = 8
DATA_START_ROW = 9
DATA_FINAL_ROW = 45  # inclusive
ANCHOR_ROW = 30
TOTAL_ROW = 46

EXPECTED_FIRST_LINE = "CITY OF MELBOURNE"
EXPECTED_HEADING_NAME = "Sensor"
EXPECTED_ANCHOR_NAME = "Spencer St-Collins St (South)"
EXPECTED_TOTAL_NAME = "Total"

HOURS_PER_DAY = 24
MISSING_VALUE = "N/A"


class CsvSchema:
    """Sample a few known rows to catch silent row or column shifts.

    This is not a grammar: only line 0, the headings row, one anchor
    sensor row and the totals row are checked. Every other line passes.
    """

    def validate(self, line: str, line_index: int) -> bool:
        if line_index < 0:
            raise InvalidArgumentError(f"Line index must not be negative, got {line_index}")
        if line_index == 0:
            return line == EXPECTED_FIRST_LINE
        if line_index == HEADINGS_ROW:
            return line.startswith(EXPECTED_HEADING_NAME)
        if line_index == ANCHOR_ROW:
            return line.startswith(EXPECTED_ANCHOR_NAME)
        if line_index == TOTAL_ROW:
            return line.startswith(EXPECTED_TOTAL_NAME)
        return True

    def check(self, document: RawCsvDocument, last_index: int = TOTAL_ROW) -> None:
        """Raise ``FormatError`` for the first invalid line up to ``last_index``."""
        for line_index, line in enumerate(document.lines[: last_index + 1]):
            if not self.validate(line, line_index):
                raise FormatError(document.name, line_index, line, "anchor check failed")
        if len(document.lines) <= last_index:
            raise FormatError(
                document.name,
                len(document.lines),
                None,
                f"file ends before line {last_index}",
            )
