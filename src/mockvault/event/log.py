"""
MockVault Event Log

Bounded history of served mock calls.

Capacity is enforced lazily at write time: when a scope already holds
``max_event_count`` events, the single oldest event of that scope is
deleted right before the new one is inserted. The check, the eviction and
the insert run under one lock per scope, so concurrent recordings never
push a scope past its bound.
"""

import itertools
import logging
import threading
from dataclasses import replace
from enum import Enum
from typing import Dict, Iterable, List, Optional

from ..errors import InvalidConfiguration
from ..repository import Repository
from .model import Event


class EventScope(Enum):
    """Unit the event bound applies to."""

    GLOBAL = "global"
    OPERATION = "operation"


class EventLog:
    """
    Event history with oldest-first eviction.

    Example:
        log = EventLog(InMemoryRepository(), max_event_count=2)
        log.record_event(e1)
        log.record_event(e2)
        log.record_event(e3)  # evicts e1
    """

    def __init__(
        self,
        repository: Repository[Event],
        max_event_count: int,
        scope: EventScope = EventScope.GLOBAL
    ):
        """
        Initialize event log.

        Args:
            repository: Store holding the events
            max_event_count: Maximum retained events per scope
            scope: Whether the bound is global or per operation

        Raises:
            InvalidConfiguration: If max_event_count is not a positive integer
        """
        if not isinstance(max_event_count, int) or isinstance(max_event_count, bool) or max_event_count <= 0:
            raise InvalidConfiguration(
                f"max_event_count must be a positive integer, got {max_event_count!r}"
            )

        self.repository = repository
        self.max_event_count = max_event_count
        self.scope = scope
        self.logger = logging.getLogger("mockvault.events")

        self._sequence = itertools.count(1)
        self._registry_lock = threading.Lock()
        self._scope_locks: Dict[Optional[str], threading.Lock] = {}

    def _scope_key(self, operation_id: Optional[str]) -> Optional[str]:
        return operation_id if self.scope == EventScope.OPERATION else None

    def _lock_for(self, scope_key: Optional[str]) -> threading.Lock:
        with self._registry_lock:
            lock = self._scope_locks.get(scope_key)
            if lock is None:
                lock = self._scope_locks[scope_key] = threading.Lock()
            return lock

    def record_event(self, event: Event) -> Event:
        """
        Store an event, evicting the oldest one of its scope when full.

        Args:
            event: Event to store

        Returns:
            The stored event (with its insertion sequence assigned)

        Raises:
            StorageUnavailable: If the repository cannot be reached
        """
        scope_key = self._scope_key(event.operation_id)
        with self._lock_for(scope_key):
            if self.count(scope_key) >= self.max_event_count:
                oldest = self.oldest_event(scope_key)
                if oldest is not None:
                    self.logger.debug(f"Evicting oldest event {oldest.id} ({oldest.timestamp.isoformat()})")
                    self.repository.delete(oldest.id)

            stored = self.repository.save(replace(event, sequence=next(self._sequence)))

        self.logger.debug(f"Recorded event {stored.id} for operation {stored.operation_id}")
        return stored

    def record_events(self, events: Iterable[Event]) -> List[Event]:
        """Bulk import: applies the check-evict-insert cycle per event."""
        return [self.record_event(event) for event in events]

    def find_events(self, operation_id: Optional[str] = None) -> List[Event]:
        """Events of a scope, oldest first (all events when operation_id is None)."""
        events = self.repository.find_all()
        if operation_id is not None:
            events = [event for event in events if event.operation_id == operation_id]
        return sorted(events, key=lambda event: (event.timestamp, event.sequence))

    def find_event(self, event_id: str) -> Optional[Event]:
        return self.repository.find_one(event_id)

    def oldest_event(self, operation_id: Optional[str] = None) -> Optional[Event]:
        """
        Chronologically earliest event within a scope.

        Ties on timestamp are broken by insertion order.

        Returns:
            The oldest event, or None if the scope is empty
        """
        events = self.find_events(operation_id)
        return events[0] if events else None

    def count(self, operation_id: Optional[str] = None) -> int:
        if operation_id is None:
            return self.repository.count()
        return len(self.find_events(operation_id))

    def delete_event(self, event_id: str) -> None:
        """Delete an event. Deleting an unknown id is a no-op."""
        self.repository.delete(event_id)

    def clear(self, operation_id: Optional[str] = None) -> int:
        """
        Delete all events of a scope.

        Returns:
            Number of deleted events
        """
        events = self.find_events(operation_id)
        for event in events:
            self.repository.delete(event.id)
        self.logger.info(f"Cleared {len(events)} events")
        return len(events)
