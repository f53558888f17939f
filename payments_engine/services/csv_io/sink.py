"""
CSV Account Sink

Writes the final snapshot as:

    client,available,held,total,locked
    1,1.5000,0.0000,1.5000,false

Numeric columns always carry the same number of fractional digits.
"""

import csv
from typing import IO, Iterable

from payments_engine.models.account import CSV_HEADER, Account


class CsvAccountSink:
    """Serializes accounts to a text stream."""

    def __init__(self, stream: IO[str], precision: int = 4):
        if precision < 0:
            raise ValueError("precision cannot be negative")
        self._stream = stream
        self._precision = precision

    def write(self, accounts: Iterable[Account]) -> int:
        """
        Write the header and one row per account.

        Returns:
            Number of account rows written
        """
        writer = csv.writer(self._stream, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        count = 0
        for account in accounts:
            writer.writerow(account.to_csv_row(self._precision))
            count += 1
        return count
