"""
Abstract Audit Storage Interface

DESIGN DECISION: Audit events go through an abstract interface.
This allows us to:
1. Keep events in memory for a single run (the default)
2. Ship them to a durable store later without touching the engine
3. Inspect diagnostics in tests

Audit logs are append-only - we never delete or modify them.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from payments_engine.models.audit import EngineEvent, EngineEventType


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit event storage.
    """

    @abstractmethod
    def append_event(self, event: EngineEvent) -> bool:
        """
        Append an audit event.

        Returns:
            True if stored successfully
        """

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[EngineEvent]:
        """
        Get all events of one replay, in chronological order.
        """

    @abstractmethod
    def get_events_by_account(
        self,
        account_id: int,
        event_type: Optional[EngineEventType] = None,
    ) -> list[EngineEvent]:
        """
        Get all events about one account, optionally of a single type.
        """

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[EngineEvent]:
        """
        Get the most recent events (newest first).
        """


class StorageError(Exception):
    """Base exception for storage operations."""
    pass
