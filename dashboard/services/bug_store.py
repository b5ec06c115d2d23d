"""
Bug Store
=========
Content-addressed store of Bug records keyed by dedup key.

Locking:
    - A short index lock guards the key → lock / key → Bug / extid → key maps.
    - Each key has its own lock. Every write to a Bug, including its
      creation, holds that lock, so two writers on one Bug never interleave
      and two ingestions racing on a new key create exactly one Bug.
    - Group reads take a snapshot of the committed records under the index
      lock only; no global lock is held while rendering.

Transactions:
    A writer works on a deep copy of the committed Bug. The copy replaces the
    record only when the `with` block exits normally; an exception discards
    it, so a failed write leaves no visible trace.
"""
import itertools
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple

from dashboard.core.errors import NotFoundError
from dashboard.models.bug import Bug

logger = logging.getLogger(__name__)


class BugStore:

    def __init__(self) -> None:
        self._index_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._bugs: dict[str, Bug] = {}
        self._by_extid: dict[str, str] = {}
        self._seq = itertools.count(1)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def resolve_key(self, bug_id: str) -> str:
        """Map an internal key or an extid to the internal key."""
        with self._index_lock:
            if bug_id in self._bugs:
                return bug_id
            key = self._by_extid.get(bug_id)
        if key is None:
            raise NotFoundError("bug", bug_id)
        return key

    def get(self, bug_id: str) -> Bug:
        """Return the committed snapshot of a Bug. Do not mutate it."""
        key = self.resolve_key(bug_id)
        return self._bugs[key]

    def list(self, namespace: Optional[str] = None, status: Optional[str] = None) -> List[Bug]:
        """Committed Bugs in creation order, optionally filtered."""
        with self._index_lock:
            bugs = list(self._bugs.values())
        bugs.sort(key=lambda b: b.seq)
        return [
            b for b in bugs
            if (namespace is None or b.namespace == namespace)
            and (status is None or b.status == status)
        ]

    def __len__(self) -> int:
        return len(self._bugs)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    @contextmanager
    def open_or_create(self, key: str, factory: Callable[[], Bug]) -> Iterator[Tuple[Bug, bool]]:
        """
        Open the Bug stored under `key` for writing, creating it if absent.

        Yields
        ------
        (Bug, bool)
            Working copy and whether it is a new Bug. For a new Bug the
            copy comes from `factory()`; its `seq` is assigned on commit.
        """
        with self._index_lock:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            existing = self._bugs.get(key)
            working = existing.model_copy(deep=True) if existing is not None else factory()
            yield working, existing is None
            if existing is None:
                working.seq = next(self._seq)
                logger.info("[STORE] Created bug %s (extid=%s) '%s'", key, working.extid, working.title)
            self._commit(key, working)

    @contextmanager
    def transaction(self, bug_id: str) -> Iterator[Bug]:
        """Open an existing Bug (by key or extid) for writing."""
        key = self.resolve_key(bug_id)
        with self._index_lock:
            lock = self._locks[key]
        with lock:
            working = self._bugs[key].model_copy(deep=True)
            yield working
            self._commit(key, working)

    def _commit(self, key: str, bug: Bug) -> None:
        with self._index_lock:
            self._bugs[key] = bug
            self._by_extid[bug.extid] = key
