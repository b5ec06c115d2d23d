"""
Commit Ledger
=============
Append-only store of commits announced by the VCS feed and by cause
bisections, queryable by exact title.

Titles are not unique across repos. A lookup returns the most recently
appended match, optionally narrowed to a repo/branch.
"""
import logging
import threading
from typing import Iterable, List, Optional

from dashboard.models.commit import Commit
from dashboard.utils.text import require_utf8

logger = logging.getLogger(__name__)


class CommitLedger:
    """
    In-memory commit ledger.

    Usage:
        ledger = CommitLedger()
        ledger.append([Commit(hash="h1", title="foo: fix1")])
        ledger.find_by_title("foo: fix1").hash   # "h1"
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: List[Commit] = []
        # title → indices into _entries, oldest first
        self._by_title: dict[str, List[int]] = {}

    def append(self, commits: Iterable[Commit]) -> int:
        """
        Append commits to the ledger.

        Entries with an empty hash or title are skipped. Re-announcing an
        identical commit is a no-op. A batch holding text that is not UTF-8
        is rejected as a whole with InvalidInputError.

        Returns
        -------
        int
            Number of entries actually added.
        """
        commits = list(commits)
        for commit in commits:
            require_utf8(commit.model_dump())
        added = 0
        with self._lock:
            for commit in commits:
                if not commit.hash or not commit.title:
                    logger.warning("[LEDGER] Skipping incomplete commit: %r", commit)
                    continue
                indices = self._by_title.setdefault(commit.title, [])
                if any(self._entries[i] == commit for i in indices):
                    continue
                indices.append(len(self._entries))
                self._entries.append(commit)
                added += 1
        if added:
            logger.info("[LEDGER] Appended %d commit(s), %d total", added, len(self._entries))
        return added

    def find_by_title(
        self,
        title: str,
        repo: Optional[str] = None,
        branch: Optional[str] = None,
    ) -> Optional[Commit]:
        """Return the latest commit with exactly this title, or None."""
        with self._lock:
            indices = list(self._by_title.get(title, ()))
            entries = [self._entries[i] for i in reversed(indices)]
        for commit in entries:
            if repo is not None and commit.repo != repo:
                continue
            if branch is not None and commit.branch != branch:
                continue
            return commit
        return None

    def __len__(self) -> int:
        return len(self._entries)
