"""
In-Memory Ledger Engine

The transaction state machine. Owns two tables:
- accounts: client id -> Account
- history:  tx id -> HistoryEntry (accepted deposits and withdrawals only)

TRANSITIONS:
- deposit:    available += amount
- withdrawal: available -= amount (requires available >= amount)
- dispute:    deposit    -> available -= amount, held += amount
              withdrawal -> held += amount (provisional restoration,
                            so total rises by amount)
- resolve:    held -= amount, available += amount
- chargeback: held -= amount (total falls by amount), account locked

CRITICAL: Every transition is computed against the current values and
committed only after all preconditions pass. A rejected transaction
leaves both tables exactly as they were.

Balance arithmetic is exact. It runs at LEDGER_PRECISION significant
digits with Inexact trapped, and a result that would need rounding is
rejected as balance_out_of_range.

A locked account rejects everything for the rest of the run,
including disputes against history recorded before the lock.
"""

from decimal import Inexact, localcontext
from typing import Literal, Optional

from payments_engine.audit import AuditLogger
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
from payments_engine.models.account import LEDGER_PRECISION, ZERO, Account
from payments_engine.models.outcome import ApplyOutcome
from payments_engine.models.transaction import (
    HistoryEntry,
    HistoryState,
    Transaction,
    TransactionKind,
)


AccountOrder = Literal["ascending", "first_seen"]

# Replacement account and history entry produced by one transition
Change = tuple[Account, HistoryEntry]


class LedgerEngine(TransactionEngine):
    """
    Single-threaded, synchronous transaction engine.

    Construct one per stream and discard it after taking the snapshot.
    """

    def __init__(
        self,
        audit_logger: Optional[AuditLogger] = None,
        account_order: AccountOrder = "ascending",
    ):
        self._accounts: dict[int, Account] = {}
        self._history: dict[int, HistoryEntry] = {}
        self._audit_logger = audit_logger
        self._account_order = account_order

    # -------------------------------------------------------------------------
    # Public contract
    # -------------------------------------------------------------------------

    def apply(self, transaction: Transaction) -> ApplyOutcome:
        """
        Apply one transaction.

        Rejections are returned as outcomes and logged at warning level;
        they never raise.
        """
        try:
            self._transition(transaction)
        except TransactionRejectedError as e:
            outcome = ApplyOutcome(
                kind=transaction.kind,
                account_id=transaction.account_id,
                tx_id=transaction.tx_id,
                accepted=False,
                reason=e.reason,
                message=str(e),
            )
            if self._audit_logger:
                self._audit_logger.log_transaction_rejected(outcome)
            return outcome

        outcome = ApplyOutcome(
            kind=transaction.kind,
            account_id=transaction.account_id,
            tx_id=transaction.tx_id,
            accepted=True,
        )
        if self._audit_logger:
            self._audit_logger.log_transaction_applied(outcome)
        return outcome

    def snapshot(self) -> tuple[Account, ...]:
        """All accounts, ascending by client id or in first-seen order."""
        accounts = list(self._accounts.values())
        if self._account_order == "ascending":
            accounts.sort(key=lambda account: account.client)
        return tuple(accounts)

    def get_account(self, client: int) -> Optional[Account]:
        return self._accounts.get(client)

    def get_history_entry(self, tx_id: int) -> Optional[HistoryEntry]:
        return self._history.get(tx_id)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _transition(self, transaction: Transaction) -> None:
        account = self._accounts.get(transaction.account_id)
        if account is not None and account.locked:
            raise AccountLockedError(transaction)

        with localcontext() as ctx:
            ctx.prec = LEDGER_PRECISION
            ctx.traps[Inexact] = True
            try:
                updated, entry = self._dispatch(transaction, account)
                # total is computed on read; it has to be exact as well
                _ = updated.total
            except Inexact:
                raise BalanceOutOfRangeError(transaction)

        self._commit(transaction, updated, entry)

    def _dispatch(self, transaction: Transaction, account: Optional[Account]) -> Change:
        if not transaction.references_history:
            if transaction.tx_id in self._history:
                raise DuplicateTransactionError(transaction)
            current = account or Account.open(transaction.account_id)
            if transaction.kind == TransactionKind.DEPOSIT:
                return self._deposit(transaction, current)
            return self._withdraw(transaction, current)

        account, entry = self._referenced(transaction)
        if transaction.kind == TransactionKind.DISPUTE:
            return self._dispute(transaction, account, entry)
        if transaction.kind == TransactionKind.RESOLVE:
            return self._resolve(transaction, account, entry)
        return self._chargeback(transaction, account, entry)

    def _deposit(self, transaction: Transaction, account: Account) -> Change:
        updated = account.model_copy(update={
            "available": account.available + transaction.amount,
        })
        return updated, HistoryEntry.record(transaction)

    def _withdraw(self, transaction: Transaction, account: Account) -> Change:
        if account.available < transaction.amount:
            raise InsufficientFundsError(transaction, account.available)

        updated = account.model_copy(update={
            "available": account.available - transaction.amount,
        })
        return updated, HistoryEntry.record(transaction)

    def _dispute(self, transaction: Transaction, account: Account, entry: HistoryEntry) -> Change:
        if entry.state != HistoryState.ACTIVE:
            raise InvalidDisputeStateError(transaction, entry.state.value)

        if entry.kind == TransactionKind.DEPOSIT:
            updated = account.model_copy(update={
                "available": account.available - entry.amount,
                "held": account.held + entry.amount,
            })
        else:
            # Withdrawn funds are provisionally restored into held
            updated = account.model_copy(update={
                "held": account.held + entry.amount,
            })
        return updated, entry.with_state(HistoryState.DISPUTED)

    def _resolve(self, transaction: Transaction, account: Account, entry: HistoryEntry) -> Change:
        if entry.state != HistoryState.DISPUTED:
            raise InvalidDisputeStateError(transaction, entry.state.value)

        updated = account.model_copy(update={
            "held": account.held - entry.amount,
            "available": account.available + entry.amount,
        })
        return updated, entry.with_state(HistoryState.ACTIVE)

    def _chargeback(self, transaction: Transaction, account: Account, entry: HistoryEntry) -> Change:
        if entry.state != HistoryState.DISPUTED:
            raise InvalidDisputeStateError(transaction, entry.state.value)

        updated = account.model_copy(update={
            "held": account.held - entry.amount,
            "locked": True,
        })
        return updated, entry.with_state(HistoryState.CHARGED_BACK)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _referenced(self, transaction: Transaction) -> tuple[Account, HistoryEntry]:
        """History entry a dispute-family record points at, with its account."""
        entry = self._history.get(transaction.tx_id)
        if entry is None or entry.account_id != transaction.account_id:
            raise UnknownTransactionError(transaction)

        account = self._accounts.get(transaction.account_id)
        if account is None:
            raise LedgerInvariantError(
                f"History entry {transaction.tx_id} has no account {transaction.account_id}"
            )
        return account, entry

    def _commit(
        self,
        transaction: Transaction,
        account: Account,
        entry: HistoryEntry,
    ) -> None:
        """Store the new account and history entry together."""
        if account.held < ZERO:
            raise LedgerInvariantError(
                f"Held balance of account {account.client} would become {account.held}"
            )

        previous = self._accounts.get(account.client)
        self._accounts[account.client] = account
        self._history[transaction.tx_id] = entry

        if not self._audit_logger:
            return
        if previous is None:
            self._audit_logger.log_account_opened(account.client, transaction.tx_id)
        if account.locked and (previous is None or not previous.locked):
            self._audit_logger.log_account_locked(account.client, transaction.tx_id)
