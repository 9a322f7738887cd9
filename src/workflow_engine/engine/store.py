"""Keyed repositories for definitions and instances.

The in-memory implementation lives for the process lifetime only. If/when
durability is needed, another :class:`KeyedRepository` can be swapped in
without touching the service.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Generic, Protocol, TypeVar

T = TypeVar("T")


class KeyedRepository(Protocol[T]):
    def put(self, key: str, value: T) -> None: ...

    def get(self, key: str) -> T | None: ...

    def list(self) -> list[T]: ...

    def __len__(self) -> int: ...


@dataclass
class InMemoryRepository(Generic[T]):
    """Thread-safe dict-backed repository preserving insertion order."""

    _items: dict[str, T] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._items[key] = value

    def get(self, key: str) -> T | None:
        with self._lock:
            return self._items.get(key)

    def list(self) -> list[T]:
        with self._lock:
            return list(self._items.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
