"""
Transaction Models

These models define the records flowing into the engine:
1. Transaction  - one validated input record
2. HistoryEntry - the retained deposit/withdrawal a later dispute refers to

DESIGN DECISION: Structural validation lives on the model itself.
A Transaction that exists is well-formed: deposits and withdrawals
carry a non-negative amount, dispute-family records carry none.
Whether the engine ACCEPTS it is a separate question.
"""

from decimal import Decimal, localcontext
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from payments_engine.models.account import MAX_CLIENT_ID


# u32 transaction ids
MAX_TX_ID = 4294967295

# 96-bit decimal range with at most 28 fractional digits
MAX_AMOUNT = Decimal("79228162514264337593543950335")
MAX_AMOUNT_SCALE = 28


# =============================================================================
# ENUMS
# =============================================================================

class TransactionKind(str, Enum):
    """
    Supported transaction kinds.

    DEPOSIT and WITHDRAWAL move money and carry an amount.
    The other three refer back to an earlier DEPOSIT/WITHDRAWAL.
    """
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def moves_funds(self) -> bool:
        return self in (TransactionKind.DEPOSIT, TransactionKind.WITHDRAWAL)


class HistoryState(str, Enum):
    """
    Lifecycle of a recorded deposit/withdrawal.

    ACTIVE -> DISPUTED        (dispute)
    DISPUTED -> ACTIVE        (resolve)
    DISPUTED -> CHARGED_BACK  (chargeback, terminal)
    """
    ACTIVE = "active"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


def _fits_scale(amount: Decimal) -> bool:
    """Is the amount exact at MAX_AMOUNT_SCALE fractional digits? Trailing zeros are fine."""
    with localcontext() as ctx:
        ctx.prec = len(str(int(MAX_AMOUNT))) + MAX_AMOUNT_SCALE
        return amount == amount.quantize(Decimal(1).scaleb(-MAX_AMOUNT_SCALE))


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """
    A single validated transaction record.

    Field aliases match the CSV columns (type, client, tx, amount).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="Transaction kind"
    )
    account_id: int = Field(
        ...,
        alias="client",
        ge=1,
        le=MAX_CLIENT_ID,
        description="Target client/account"
    )
    tx_id: int = Field(
        ...,
        alias="tx",
        ge=0,
        le=MAX_TX_ID,
        description="Transaction id (referenced id for dispute-family kinds)"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        description="Amount moved; only for deposit and withdrawal"
    )

    @model_validator(mode="after")
    def validate_amount(self) -> "Transaction":
        """Amount is required for fund movements and forbidden otherwise."""
        if self.kind.moves_funds:
            if self.amount is None:
                raise ValueError(f"{self.kind.value} requires an amount")
            if not self.amount.is_finite():
                raise ValueError("Amount must be a finite number")
            if self.amount < 0:
                raise ValueError("Amount cannot be negative")
            if self.amount > MAX_AMOUNT:
                raise ValueError(f"Amount cannot exceed {MAX_AMOUNT}")
            if not _fits_scale(self.amount):
                raise ValueError(
                    f"Amount cannot have more than {MAX_AMOUNT_SCALE} decimal places"
                )
        elif self.amount is not None:
            raise ValueError(f"{self.kind.value} must not carry an amount")
        return self

    @property
    def references_history(self) -> bool:
        """Does this record point at an earlier deposit/withdrawal?"""
        return not self.kind.moves_funds


# =============================================================================
# HISTORY
# =============================================================================

class HistoryEntry(BaseModel):
    """
    Retained deposit/withdrawal, keyed by tx id inside the engine.

    Only the engine creates these, and only for accepted
    deposits and withdrawals.
    """
    model_config = ConfigDict(frozen=True)

    kind: TransactionKind
    account_id: int
    amount: Decimal
    state: HistoryState = HistoryState.ACTIVE

    @model_validator(mode="after")
    def validate_kind(self) -> "HistoryEntry":
        if not self.kind.moves_funds:
            raise ValueError(f"{self.kind.value} records are never kept in history")
        return self

    @property
    def disputed(self) -> bool:
        return self.state == HistoryState.DISPUTED

    @classmethod
    def record(cls, transaction: Transaction) -> "HistoryEntry":
        """Build the history entry for an accepted deposit/withdrawal."""
        return cls(
            kind=transaction.kind,
            account_id=transaction.account_id,
            amount=transaction.amount,
        )

    def with_state(self, state: HistoryState) -> "HistoryEntry":
        return self.model_copy(update={"state": state})
