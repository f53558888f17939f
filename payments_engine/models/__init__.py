"""
Data Models Package

This package contains all Pydantic models used by the Payments Engine.
Every record flowing through the system conforms to these schemas.
"""

from payments_engine.models.account import (
    CSV_HEADER,
    Account,
    format_amount,
)
from payments_engine.models.transaction import (
    HistoryEntry,
    HistoryState,
    Transaction,
    TransactionKind,
)
from payments_engine.models.outcome import (
    ApplyOutcome,
    RejectionReason,
    ValidationIssue,
)
from payments_engine.models.audit import (
    EngineEvent,
    EngineEventBuilder,
    EngineEventType,
    EngineSeverity,
)

__all__ = [
    # Domain models
    "Account",
    "CSV_HEADER",
    "format_amount",
    "HistoryEntry",
    "HistoryState",
    "Transaction",
    "TransactionKind",
    # Outcomes
    "ApplyOutcome",
    "RejectionReason",
    "ValidationIssue",
    # Audit models
    "EngineEvent",
    "EngineEventBuilder",
    "EngineEventType",
    "EngineSeverity",
]
