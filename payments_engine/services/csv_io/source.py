"""
CSV Transaction Source

Streams raw transaction records from a delimited-text file:

    type, client, tx, amount
    deposit, 1, 1, 1.0
    dispute, 1, 1,

DESIGN DECISION: The source does NOT validate values. It only splits
rows into columns, trims whitespace and attaches the line number.
Turning text into a Transaction is the validator's job, so a bad row
is reported once, in one place, and never stops the stream.

Rows are read lazily; the file is never loaded whole.
"""

import csv
from pathlib import Path
from typing import IO, Iterator, Optional, Union

from pydantic import BaseModel, Field


REQUIRED_COLUMNS = ("type", "client", "tx")
OPTIONAL_COLUMNS = ("amount",)


class SourceFormatError(Exception):
    """The input as a whole is unusable: missing header columns, undecodable bytes, broken CSV."""
    pass


class RawRecord(BaseModel):
    """One input row, split into named columns."""

    line_number: int = Field(
        ...,
        ge=1,
        description="1-based physical line number in the input"
    )
    fields: dict[str, Optional[str]] = Field(default_factory=dict)


class CsvTransactionSource:
    """
    Iterable over the raw records of a CSV file or text stream.
    """

    def __init__(self, source: Union[str, Path, IO[str]]):
        """
        Args:
            source: Path to the CSV file, or an already open text stream
        """
        self._source = source

    @property
    def name(self) -> str:
        if isinstance(self._source, (str, Path)):
            return str(self._source)
        return getattr(self._source, "name", "<stream>")

    def __iter__(self) -> Iterator[RawRecord]:
        try:
            if isinstance(self._source, (str, Path)):
                with open(self._source, newline="", encoding="utf-8") as handle:
                    yield from self._read(handle)
            else:
                yield from self._read(self._source)
        except (csv.Error, UnicodeDecodeError) as e:
            raise SourceFormatError(f"{self.name}: unreadable input: {e}") from e

    def _read(self, handle: IO[str]) -> Iterator[RawRecord]:
        reader = csv.reader(handle, skipinitialspace=True)

        header = self._read_header(reader)
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            cells = [cell.strip() for cell in row]
            # Short rows (e.g. "dispute,1,1") leave trailing columns absent
            cells += [""] * (len(header) - len(cells))
            fields = {
                column: (cells[index] or None)
                for index, column in enumerate(header)
                if column
            }
            yield RawRecord(line_number=reader.line_num, fields=fields)

    def _read_header(self, reader) -> list[str]:
        try:
            header = next(reader)
        except StopIteration:
            raise SourceFormatError(f"{self.name}: input is empty")

        columns = [cell.strip().lower() for cell in header]
        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise SourceFormatError(
                f"{self.name}: missing required columns: {', '.join(missing)}"
            )
        known = set(REQUIRED_COLUMNS + OPTIONAL_COLUMNS)
        # Unknown columns are kept positionally but never read
        return [c if c in known else "" for c in columns]
