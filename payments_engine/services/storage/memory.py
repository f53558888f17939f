"""
In-memory audit storage.

Bounded: once `max_events` is reached the oldest events are dropped.
"""

from collections import deque
from typing import Optional
from uuid import UUID

from payments_engine.models.audit import EngineEvent, EngineEventType
from payments_engine.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
)


class InMemoryAuditStorage(AuditStorageInterface):
    """Keeps the most recent audit events of the process in a deque."""

    def __init__(self, max_events: int = 10000):
        if max_events < 1:
            raise StorageError("max_events must be at least 1")
        self._events: deque[EngineEvent] = deque(maxlen=max_events)

    def __len__(self) -> int:
        return len(self._events)

    def append_event(self, event: EngineEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[EngineEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_account(
        self,
        account_id: int,
        event_type: Optional[EngineEventType] = None,
    ) -> list[EngineEvent]:
        return [
            e for e in self._events
            if e.account_id == account_id
            and (event_type is None or e.event_type == event_type)
        ]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[EngineEvent]:
        if limit <= 0:
            return []
        return list(reversed(self._events))[:limit]
