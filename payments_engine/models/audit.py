"""
Audit Models for the Payments Engine

Every significant step of a replay is described by an EngineEvent.
This provides:
1. A diagnostic for every rejected or malformed record
2. Traceability of account openings and locks
3. A correlation id tying together all events of one run

DESIGN DECISION: Audit events are append-only. We never modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from payments_engine.models.outcome import ApplyOutcome, ValidationIssue


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EngineEventType(str, Enum):
    """Types of events we audit."""
    # Stream lifecycle
    STREAM_STARTED = "stream_started"
    STREAM_COMPLETED = "stream_completed"

    # Input boundary
    RECORD_MALFORMED = "record_malformed"

    # State machine
    ACCOUNT_OPENED = "account_opened"
    TRANSACTION_APPLIED = "transaction_applied"
    TRANSACTION_REJECTED = "transaction_rejected"
    ACCOUNT_LOCKED = "account_locked"


class EngineSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class EngineEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the diagnostic trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utc_now,
        description="When the event occurred (UTC)"
    )

    # Classification
    event_type: EngineEventType
    severity: EngineSeverity = EngineSeverity.INFO

    # Context - which account / transaction is this about?
    account_id: Optional[int] = None
    tx_id: Optional[int] = None
    line_number: Optional[int] = Field(
        default=None,
        description="Input line the record came from, when known"
    )

    # Correlation - all events of one replay share this
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Rejection code (RejectionReason value or 'malformed')
    error_code: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "account_id": self.account_id,
            "tx_id": self.tx_id,
            "line_number": self.line_number,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
        }


class EngineEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = EngineEventBuilder.transaction_rejected(outcome, correlation_id)
        event = EngineEventBuilder.account_locked(client, tx_id, correlation_id)
    """

    @staticmethod
    def stream_started(
        source: str,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.STREAM_STARTED,
            correlation_id=correlation_id,
            description=f"Replay started: {source}",
            details={"source": source},
        )

    @staticmethod
    def stream_completed(
        applied: int,
        rejected: int,
        malformed: int,
        accounts: int,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.STREAM_COMPLETED,
            correlation_id=correlation_id,
            description=(
                f"Replay completed: {applied} applied, {rejected} rejected, "
                f"{malformed} malformed, {accounts} accounts"
            ),
            details={
                "applied": applied,
                "rejected": rejected,
                "malformed": malformed,
                "accounts": accounts,
            },
        )

    @staticmethod
    def record_malformed(
        line_number: Optional[int],
        issues: list[ValidationIssue],
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.RECORD_MALFORMED,
            severity=EngineSeverity.WARNING,
            line_number=line_number,
            correlation_id=correlation_id,
            description=f"Malformed record skipped ({len(issues)} issues)",
            details={
                "issues": [issue.model_dump() for issue in issues],
            },
            error_code="malformed",
        )

    @staticmethod
    def account_opened(
        account_id: int,
        tx_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.ACCOUNT_OPENED,
            severity=EngineSeverity.DEBUG,
            account_id=account_id,
            tx_id=tx_id,
            correlation_id=correlation_id,
            description=f"Account {account_id} opened",
        )

    @staticmethod
    def transaction_applied(
        outcome: ApplyOutcome,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.TRANSACTION_APPLIED,
            severity=EngineSeverity.DEBUG,
            account_id=outcome.account_id,
            tx_id=outcome.tx_id,
            correlation_id=correlation_id,
            description=f"{outcome.kind.value} applied",
            details={"kind": outcome.kind.value},
        )

    @staticmethod
    def transaction_rejected(
        outcome: ApplyOutcome,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        reason = outcome.reason.value if outcome.reason else None
        return EngineEvent(
            event_type=EngineEventType.TRANSACTION_REJECTED,
            severity=EngineSeverity.WARNING,
            account_id=outcome.account_id,
            tx_id=outcome.tx_id,
            correlation_id=correlation_id,
            description=f"{outcome.kind.value} rejected: {outcome.message}",
            details={"kind": outcome.kind.value},
            error_code=reason,
        )

    @staticmethod
    def account_locked(
        account_id: int,
        tx_id: int,
        correlation_id: Optional[UUID] = None,
    ) -> EngineEvent:
        return EngineEvent(
            event_type=EngineEventType.ACCOUNT_LOCKED,
            severity=EngineSeverity.WARNING,
            account_id=account_id,
            tx_id=tx_id,
            correlation_id=correlation_id,
            description=f"Account {account_id} locked by chargeback of tx {tx_id}",
        )
