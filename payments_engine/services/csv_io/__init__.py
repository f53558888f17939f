"""CSV input/output services package."""

from payments_engine.services.csv_io.sink import CsvAccountSink
from payments_engine.services.csv_io.source import (
    CsvTransactionSource,
    RawRecord,
    SourceFormatError,
)

__all__ = [
    "CsvAccountSink",
    "CsvTransactionSource",
    "RawRecord",
    "SourceFormatError",
]
