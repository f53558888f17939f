"""Services package."""

from payments_engine.services.csv_io import (
    CsvAccountSink,
    CsvTransactionSource,
    RawRecord,
    SourceFormatError,
)
from payments_engine.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    StorageError,
)

__all__ = [
    # CSV services
    "CsvAccountSink",
    "CsvTransactionSource",
    "RawRecord",
    "SourceFormatError",
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "StorageError",
]
