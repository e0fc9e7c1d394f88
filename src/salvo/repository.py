"""Keyed match storage with an atomic read-modify-write primitive."""

from __future__ import annotations

import copy
import logging
import threading
from typing import Callable, Protocol, TypeVar

from salvo.engine.errors import MatchNotFound
from salvo.engine.match import Match

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MatchRepository(Protocol):
    """Persistence boundary consumed by the match service."""

    def get(self, match_id: str) -> Match | None:
        ...

    def put(self, match: Match) -> None:
        ...

    def update(self, match_id: str, mutate: Callable[[Match], T]) -> T:
        """Apply ``mutate`` to the stored match as one atomic step and return its result."""
        ...


class InMemoryMatchRepository:
    """Process-local repository guarding each match with its own lock.

    Locks are created by ``put`` only; lookups of unknown ids never grow the lock
    table. ``update`` holds the match lock across load, mutate and store. The callback
    works on a copy which replaces the stored match only if the callback returns
    normally, so a rejected transition can never leave half-applied changes behind.
    """

    def __init__(self) -> None:
        self._matches: dict[str, Match] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get(self, match_id: str) -> Match | None:
        lock = self._existing_lock(match_id)
        if lock is None:
            return None
        with lock:
            match = self._matches.get(match_id)
            return copy.deepcopy(match) if match is not None else None

    def put(self, match: Match) -> None:
        with self._lock_for(match.match_id):
            self._matches[match.match_id] = copy.deepcopy(match)
        logger.debug("match_stored", extra={"match_id": match.match_id})

    def update(self, match_id: str, mutate: Callable[[Match], T]) -> T:
        lock = self._existing_lock(match_id)
        if lock is None:
            raise MatchNotFound(match_id)
        with lock:
            stored = self._matches.get(match_id)
            if stored is None:
                raise MatchNotFound(match_id)
            working = copy.deepcopy(stored)
            result = mutate(working)
            self._matches[match_id] = working
            return result

    def match_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._matches)

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._matches)

    def _existing_lock(self, match_id: str) -> threading.Lock | None:
        with self._registry_lock:
            return self._locks.get(match_id)

    def _lock_for(self, match_id: str) -> threading.Lock:
        """Return the lock for ``match_id``, creating it. Only ``put`` may add ids."""
        with self._registry_lock:
            lock = self._locks.get(match_id)
            if lock is None:
                lock = self._locks[match_id] = threading.Lock()
            return lock
