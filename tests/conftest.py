"""Shared fixtures for the Payments Engine tests."""

from decimal import Decimal
from typing import Optional

import pytest

from payments_engine.audit import AuditLogger
from payments_engine.engine import LedgerEngine
from payments_engine.models import Transaction, TransactionKind
from payments_engine.services.storage import InMemoryAuditStorage


def _make_tx(
    kind: str,
    client: int,
    tx: int,
    amount: Optional[str] = None,
) -> Transaction:
    """Build a Transaction from short literals: make_tx('deposit', 1, 1, '10')."""
    return Transaction(
        kind=TransactionKind(kind),
        account_id=client,
        tx_id=tx,
        amount=Decimal(amount) if amount is not None else None,
    )


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage(max_events=1000)


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def engine(audit_logger) -> LedgerEngine:
    return LedgerEngine(audit_logger=audit_logger)


@pytest.fixture
def make_tx():
    return _make_tx
