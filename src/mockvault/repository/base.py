"""
MockVault Repository

Generic entity store keyed by opaque string identifiers.

The ``Repository`` protocol is the boundary the rest of MockVault codes
against. ``InMemoryRepository`` is the shipped implementation: a thread-safe,
insertion-ordered dictionary that works for any entity exposing an ``id``
attribute (projects, events, ...).
"""

import threading
from typing import Callable, Dict, Generic, List, Optional, Protocol, TypeVar

T = TypeVar('T')


class Repository(Protocol[T]):
    """Persistence collaborator interface."""

    def find_one(self, entity_id: str) -> Optional[T]:
        ...

    def find_all(self) -> List[T]:
        ...

    def save(self, entity: T) -> T:
        ...

    def delete(self, entity_id: str) -> None:
        ...

    def count(self) -> int:
        ...


class InMemoryRepository(Generic[T]):
    """
    Thread-safe in-memory repository.

    Entities are stored by their ``id`` attribute (or by a custom key
    function) in insertion order. Saving an entity with an existing id
    replaces it in place without changing its position.

    Example:
        projects = InMemoryRepository[Project]()
        projects.save(project)
        found = projects.find_one(project.id)
    """

    def __init__(self, key: Optional[Callable[[T], str]] = None):
        """
        Initialize repository.

        Args:
            key: Function extracting the identifier from an entity
                 (defaults to the ``id`` attribute)
        """
        self._key = key or (lambda entity: entity.id)
        self._entities: Dict[str, T] = {}
        self._lock = threading.RLock()

    def find_one(self, entity_id: str) -> Optional[T]:
        with self._lock:
            return self._entities.get(entity_id)

    def find_all(self) -> List[T]:
        with self._lock:
            return list(self._entities.values())

    def save(self, entity: T) -> T:
        with self._lock:
            self._entities[self._key(entity)] = entity
        return entity

    def delete(self, entity_id: str) -> None:
        """Delete an entity. Unknown ids are ignored."""
        with self._lock:
            self._entities.pop(entity_id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._entities)

    def clear(self) -> None:
        with self._lock:
            self._entities.clear()
