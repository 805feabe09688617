"""
Transform cache - memoizes transformed types per (source, skipper, mutator).

The transform is pure and deterministic for a fixed triple, so each result is
computed once and reused. Skippers and mutators are keyed by identity: build
them once and reuse the same objects to get cache hits. Entries live until
clear() is called.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable


class TransformCache[R]:
    """Thread-safe, populate-once-per-key cache of transform results."""

    def __init__(self) -> None:
        self._entries: dict[tuple[Hashable, int, int], tuple[object, object, R]] = {}
        self._lock = threading.Lock()

    def key(self, source: Hashable, skip: object, mutate: object) -> tuple[Hashable, int, int]:
        return (source, id(skip), id(mutate))

    def get(self, source: Hashable, skip: object, mutate: object) -> R | None:
        entry = self._entries.get(self.key(source, skip, mutate))
        return entry[2] if entry is not None else None

    def get_or_create(self, source: Hashable, skip: object, mutate: object, factory: Callable[[], R]) -> R:
        """
        Return the cached result for the triple, computing it with factory on a miss.

        factory runs under the cache lock, so concurrent callers with the same
        key never compute it twice.
        """
        key = self.key(source, skip, mutate)
        entry = self._entries.get(key)
        if entry is not None:
            return entry[2]

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                # skip and mutate are held so their ids are not reused while cached
                entry = (skip, mutate, factory())
                self._entries[key] = entry
            return entry[2]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, triple: object) -> bool:
        if not isinstance(triple, tuple) or len(triple) != 3:
            return False
        source, skip, mutate = triple
        return self.key(source, skip, mutate) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
