"""
Outcome Models

What the engine and the validator report back to their callers.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from payments_engine.models.transaction import TransactionKind


class RejectionReason(str, Enum):
    """Why the engine refused a well-formed transaction."""
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_DISPUTE_STATE = "invalid_dispute_state"
    ACCOUNT_LOCKED = "account_locked"
    UNKNOWN_TRANSACTION = "unknown_transaction"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    BALANCE_OUT_OF_RANGE = "balance_out_of_range"


class ApplyOutcome(BaseModel):
    """Result of applying one transaction to the engine."""

    kind: TransactionKind
    account_id: int
    tx_id: int
    accepted: bool
    reason: Optional[RejectionReason] = Field(
        default=None,
        description="Set when the transaction was rejected"
    )
    message: str = ""

    @property
    def rejected(self) -> bool:
        return not self.accepted


class ValidationIssue(BaseModel):
    """A single problem found in a raw input record."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_kind')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
