"""
Storage Services Package

Provides the abstract audit storage interface and its in-memory
implementation. Designed to be swappable.
"""

from payments_engine.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
)
from payments_engine.services.storage.memory import InMemoryAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    # Exceptions
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
]
