"""
Audit Logger

DESIGN DECISION: Every rejected or malformed record is logged.
This provides:
1. A diagnostic for each record that did not change any balance
2. Debugging capability when final balances look wrong
3. A per-run trail tied together by a correlation id

The audit logger:
- Is synchronous, like the engine it reports for
- Writes structured lines to stderr (stdout carries the account CSV)
- Gracefully handles storage failures (never stops a replay)
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from payments_engine.models.audit import EngineEvent, EngineEventBuilder
from payments_engine.models.outcome import ApplyOutcome, ValidationIssue
from payments_engine.services.storage import AuditStorageInterface


def _configure_structlog(json_output: bool = True) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Route structlog through stdlib logging (stderr) from import time on
_configure_structlog()


def configure_logging(level: str = "WARNING", json_output: bool = True) -> None:
    """
    Configure the stdlib root logger and the structlog renderer.

    Call this once at process start, before any AuditLogger is used.
    """
    logging.basicConfig(
        stream=sys.stderr,
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )
    _configure_structlog(json_output)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (stderr)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        correlation_id: Optional[UUID] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for retention.
                    If None, only logs locally.
            correlation_id: Id shared by every event of this run.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)
        self.correlation_id = correlation_id or create_correlation_id()

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: EngineEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()
        severity = event.severity.value

        if severity == "error":
            self._logger.error("engine_event", **log_dict)
        elif severity == "warning":
            self._logger.warning("engine_event", **log_dict)
        elif severity == "debug":
            self._logger.debug("engine_event", **log_dict)
        else:
            self._logger.info("engine_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_stream_started(self, source: str) -> None:
        self.log(EngineEventBuilder.stream_started(
            source=source,
            correlation_id=self.correlation_id,
        ))

    def log_stream_completed(
        self,
        applied: int,
        rejected: int,
        malformed: int,
        accounts: int,
    ) -> None:
        self.log(EngineEventBuilder.stream_completed(
            applied=applied,
            rejected=rejected,
            malformed=malformed,
            accounts=accounts,
            correlation_id=self.correlation_id,
        ))

    def log_record_malformed(
        self,
        line_number: Optional[int],
        issues: list[ValidationIssue],
    ) -> None:
        """Log a raw record that never reached the engine."""
        self.log(EngineEventBuilder.record_malformed(
            line_number=line_number,
            issues=issues,
            correlation_id=self.correlation_id,
        ))

    def log_account_opened(self, account_id: int, tx_id: int) -> None:
        self.log(EngineEventBuilder.account_opened(
            account_id=account_id,
            tx_id=tx_id,
            correlation_id=self.correlation_id,
        ))

    def log_transaction_applied(self, outcome: ApplyOutcome) -> None:
        self.log(EngineEventBuilder.transaction_applied(
            outcome=outcome,
            correlation_id=self.correlation_id,
        ))

    def log_transaction_rejected(self, outcome: ApplyOutcome) -> None:
        """Log a well-formed transaction the engine refused."""
        self.log(EngineEventBuilder.transaction_rejected(
            outcome=outcome,
            correlation_id=self.correlation_id,
        ))

    def log_account_locked(self, account_id: int, tx_id: int) -> None:
        self.log(EngineEventBuilder.account_locked(
            account_id=account_id,
            tx_id=tx_id,
            correlation_id=self.correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a replay and pass it to every logger.
    """
    return uuid4()
