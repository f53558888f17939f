"""Record validation package."""

from payments_engine.validation.validator import (
    MalformedTransactionError,
    TransactionValidator,
)

__all__ = ["MalformedTransactionError", "TransactionValidator"]
