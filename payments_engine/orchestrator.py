"""
Main Orchestrator for the Payments Engine

This module ties together all the components and defines the
end-to-end replay flow:

    raw records -> validate -> apply -> snapshot -> write

DESIGN DECISION: The orchestrator enforces the boundaries:
- Malformed records are reported and skipped; they never reach the engine
- Rejected transactions are reported by the engine; the stream continues
- Only a broken input source or a broken invariant stops the run
"""

from typing import IO, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from payments_engine.audit import AuditLogger
from payments_engine.config import EngineSettings, get_settings
from payments_engine.engine import LedgerEngine, TransactionEngine
from payments_engine.models.account import Account
from payments_engine.models.transaction import Transaction
from payments_engine.services.csv_io import CsvAccountSink, RawRecord
from payments_engine.services.storage import InMemoryAuditStorage
from payments_engine.validation import MalformedTransactionError, TransactionValidator


class ReplayResult(BaseModel):
    """Summary of one replay."""
    model_config = ConfigDict(frozen=True)

    accounts: tuple[Account, ...] = Field(default_factory=tuple)
    applied: int = Field(default=0, ge=0)
    rejected: int = Field(default=0, ge=0)
    malformed: int = Field(default=0, ge=0)

    @property
    def processed(self) -> int:
        return self.applied + self.rejected + self.malformed


class ReplayFlow:
    """
    Orchestrates one replay of a transaction stream.

    Flow:
    1. Read     -> raw records from the source
    2. Validate -> Transaction, or skip with a malformed-record event
    3. Apply    -> engine transition, or rejection event
    4. Snapshot -> final accounts
    5. Write    -> optional sink

    A ReplayFlow owns its engine; build a new flow for each stream.
    """

    def __init__(
        self,
        engine: Optional[TransactionEngine] = None,
        validator: Optional[TransactionValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self._settings = settings or get_settings().engine
        self._audit_logger = audit_logger
        self._validator = validator or TransactionValidator()
        self._engine = engine or LedgerEngine(
            audit_logger=audit_logger,
            account_order=self._settings.account_order,
        )

    @property
    def engine(self) -> TransactionEngine:
        return self._engine

    def run(
        self,
        records: Iterable[Union[RawRecord, Transaction]],
        source_name: str = "<records>",
    ) -> ReplayResult:
        """
        Replay every record in order and return the final state.

        Records may be raw (validated here) or already-validated
        Transactions.
        """
        if self._audit_logger:
            self._audit_logger.log_stream_started(source_name)

        applied = rejected = malformed = 0

        for record in records:
            if isinstance(record, Transaction):
                transaction = record
            else:
                try:
                    transaction = self._validator.parse(
                        record.fields, line_number=record.line_number
                    )
                except MalformedTransactionError as e:
                    malformed += 1
                    if self._audit_logger:
                        self._audit_logger.log_record_malformed(
                            line_number=e.line_number,
                            issues=e.issues,
                        )
                    continue

            outcome = self._engine.apply(transaction)
            if outcome.accepted:
                applied += 1
            else:
                rejected += 1

        accounts = self._engine.snapshot()

        if self._audit_logger:
            self._audit_logger.log_stream_completed(
                applied=applied,
                rejected=rejected,
                malformed=malformed,
                accounts=len(accounts),
            )

        return ReplayResult(
            accounts=accounts,
            applied=applied,
            rejected=rejected,
            malformed=malformed,
        )

    def run_to(
        self,
        records: Iterable[Union[RawRecord, Transaction]],
        stream: IO[str],
        source_name: str = "<records>",
    ) -> ReplayResult:
        """Replay and write the snapshot as CSV to `stream`."""
        result = self.run(records, source_name=source_name)
        CsvAccountSink(stream, precision=self._settings.output_precision).write(
            result.accounts
        )
        return result


def create_replay_flow(
    settings: Optional[EngineSettings] = None,
) -> ReplayFlow:
    """
    Factory function to create a fully wired replay flow.

    Audit events are retained in memory unless audit_retention is 0.

    Returns:
        A ReplayFlow with a fresh LedgerEngine
    """
    settings = settings or get_settings().engine

    storage = None
    if settings.audit_retention > 0:
        storage = InMemoryAuditStorage(max_events=settings.audit_retention)
    audit_logger = AuditLogger(storage)

    return ReplayFlow(
        audit_logger=audit_logger,
        settings=settings,
    )
