"""
Abstract Engine Interface

DESIGN DECISION: The state machine sits behind a single abstract contract.
This allows us to:
1. Swap the in-memory engine for a persisted-history variant later
2. Add a concurrent engine (per-account critical sections) without
   touching the models, the validator or the CSV collaborators
3. Keep the orchestrator decoupled from how balances are stored

Any engine must apply transactions atomically: either every effect of
a transaction lands, or none does.
"""

from abc import ABC, abstractmethod
from typing import Optional

from payments_engine.models.account import Account
from payments_engine.models.outcome import ApplyOutcome, RejectionReason
from payments_engine.models.transaction import HistoryEntry, Transaction


class TransactionEngine(ABC):
    """
    Abstract interface for the transaction state machine.
    """

    @abstractmethod
    def apply(self, transaction: Transaction) -> ApplyOutcome:
        """
        Apply one validated transaction.

        Args:
            transaction: The next record of the stream

        Returns:
            The outcome. Rejections are reported here, not raised.

        Raises:
            LedgerInvariantError: If internal state is found inconsistent
        """

    @abstractmethod
    def snapshot(self) -> tuple[Account, ...]:
        """
        Immutable view of every account touched so far.
        """

    @abstractmethod
    def get_account(self, client: int) -> Optional[Account]:
        """
        Current state of one account, None if never seen.
        """

    @abstractmethod
    def get_history_entry(self, tx_id: int) -> Optional[HistoryEntry]:
        """
        Retained deposit/withdrawal for a tx id, None if unknown.
        """


# =============================================================================
# REJECTIONS
# =============================================================================

class TransactionRejectedError(Exception):
    """
    Base exception for a well-formed transaction the engine refuses.

    Rejections never change state.
    """
    reason: RejectionReason

    def __init__(self, transaction: Transaction, message: str):
        self.account_id = transaction.account_id
        self.tx_id = transaction.tx_id
        self.kind = transaction.kind
        super().__init__(message)


class InsufficientFundsError(TransactionRejectedError):
    """Withdrawal larger than the available balance."""
    reason = RejectionReason.INSUFFICIENT_FUNDS

    def __init__(self, transaction: Transaction, available):
        self.requested = transaction.amount
        self.available = available
        super().__init__(
            transaction,
            f"Insufficient funds: requested {transaction.amount}, available {available}",
        )


class InvalidDisputeStateError(TransactionRejectedError):
    """Dispute, resolve or chargeback against an entry in the wrong state."""
    reason = RejectionReason.INVALID_DISPUTE_STATE

    def __init__(self, transaction: Transaction, state: str):
        self.state = state
        super().__init__(
            transaction,
            f"Cannot {transaction.kind.value} tx {transaction.tx_id} in state {state}",
        )


class AccountLockedError(TransactionRejectedError):
    """Any transaction against a locked account."""
    reason = RejectionReason.ACCOUNT_LOCKED

    def __init__(self, transaction: Transaction):
        super().__init__(
            transaction,
            f"Account {transaction.account_id} is locked",
        )


class UnknownTransactionError(TransactionRejectedError):
    """Dispute-family record pointing at no history entry of this account."""
    reason = RejectionReason.UNKNOWN_TRANSACTION

    def __init__(self, transaction: Transaction):
        super().__init__(
            transaction,
            f"No deposit or withdrawal tx {transaction.tx_id} "
            f"for account {transaction.account_id}",
        )


class DuplicateTransactionError(TransactionRejectedError):
    """Deposit or withdrawal reusing a tx id already recorded."""
    reason = RejectionReason.DUPLICATE_TRANSACTION

    def __init__(self, transaction: Transaction):
        super().__init__(
            transaction,
            f"Transaction id {transaction.tx_id} was already used",
        )


class BalanceOutOfRangeError(TransactionRejectedError):
    """Resulting balance needs more digits than the ledger keeps exactly."""
    reason = RejectionReason.BALANCE_OUT_OF_RANGE

    def __init__(self, transaction: Transaction):
        super().__init__(
            transaction,
            f"Balance of account {transaction.account_id} cannot be kept exactly "
            f"after tx {transaction.tx_id}",
        )


class LedgerInvariantError(Exception):
    """Internal consistency failure. Fatal: the run must stop."""
    pass
