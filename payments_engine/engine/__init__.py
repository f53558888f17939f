"""Transaction engine package."""

from payments_engine.engine.interface import (
    AccountLockedError,
    BalanceOutOfRangeError,
    DuplicateTransactionError,
    InsufficientFundsError,
    InvalidDisputeStateError,
    LedgerInvariantError,
    TransactionEngine,
    TransactionRejectedError,
    UnknownTransactionError,
)
from payments_engine.engine.ledger import LedgerEngine

__all__ = [
    # Contract
    "TransactionEngine",
    "LedgerEngine",
    # Rejections
    "AccountLockedError",
    "BalanceOutOfRangeError",
    "DuplicateTransactionError",
    "InsufficientFundsError",
    "InvalidDisputeStateError",
    "TransactionRejectedError",
    "UnknownTransactionError",
    # Fatal
    "LedgerInvariantError",
]
