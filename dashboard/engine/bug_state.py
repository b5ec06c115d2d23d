"""
Bug State Machine
=================
Owns every change to a Bug after its creation.

States: open ⇄ fixed. The only transition path is apply_status_update();
reconciliation and bisection never touch the status.

Operations:
    apply_status_update      — replace status and the declared fix-commit titles
    reconcile_against_ledger — resolve declared titles to ledger hashes
    reconcile_pending        — reconcile every bug still waiting on a hash
    attach_bisection         — record a cause / fix bisection outcome

Merge rules for fix commits (order-independent with respect to commit polls):
    - Declaration order is kept; a title repeated in one update counts once.
    - A title that stays declared keeps its resolved hash.
    - A newly declared title starts unresolved.
    - A resolved hash is never replaced or cleared by reconciliation.

All operations run inside a BugStore transaction: one writer per Bug at a
time, and a failure part-way leaves the committed Bug untouched. Every
operation is idempotent, so at-least-once delivery of the triggering events
is safe.
"""
import logging
from typing import Iterable, List, Optional

from dashboard.core.constants import BUG_STATUSES, BisectKind, BisectStatus
from dashboard.core.errors import InvalidInputError
from dashboard.models.bug import Bug
from dashboard.models.commit import BisectCommit, FixCommit
from dashboard.services.bug_store import BugStore
from dashboard.services.commit_ledger import CommitLedger
from dashboard.utils.text import require_utf8

logger = logging.getLogger(__name__)


def validate_status(status: str) -> None:
    if not isinstance(status, str):
        raise InvalidInputError(f"status must be str, got {type(status).__name__}")
    if status not in BUG_STATUSES:
        raise InvalidInputError(
            f"Unknown bug status '{status}'. Allowed values: {sorted(BUG_STATUSES)}"
        )


def merge_fix_commits(current: List[FixCommit], titles: Iterable[str]) -> List[FixCommit]:
    """
    Build the new fix-commit list for a status update.

    Parameters
    ----------
    current : List[FixCommit]
        Fix commits currently on the Bug.
    titles : Iterable[str]
        Newly declared titles, in declaration order.

    Returns
    -------
    List[FixCommit]
        One entry per distinct non-empty title, carrying over known hashes.
    """
    known = {fc.title: fc.hash for fc in current}
    merged: List[FixCommit] = []
    seen: set[str] = set()
    for title in titles:
        title = title.strip()
        if not title or title in seen:
            continue
        seen.add(title)
        merged.append(FixCommit(title=title, hash=known.get(title)))
    return merged


class BugStateMachine:

    def __init__(self, store: BugStore, ledger: CommitLedger) -> None:
        self.store = store
        self.ledger = ledger

    def apply_status_update(self, bug_id: str, status: str, fix_commit_titles: Iterable[str] = ()) -> Bug:
        validate_status(status)
        titles = list(fix_commit_titles or ())
        require_utf8({"fix_commits": titles})
        with self.store.transaction(bug_id) as bug:
            previous = bug.status
            bug.status = status
            bug.fix_commits = merge_fix_commits(bug.fix_commits, titles)
        logger.info(
            "[STATE] Bug %s: status %s → %s, %d fix commit(s) declared",
            bug.extid, previous, status, len(bug.fix_commits),
        )
        return bug

    def reconcile_against_ledger(self, bug_id: str) -> int:
        """
        Resolve unresolved fix-commit titles of one Bug.

        Returns
        -------
        int
            Number of entries resolved by this call (0 when nothing changed).
        """
        resolved = 0
        with self.store.transaction(bug_id) as bug:
            for fc in bug.fix_commits:
                if fc.resolved:
                    continue
                commit = self.ledger.find_by_title(fc.title)
                if commit is None:
                    continue
                fc.hash = commit.hash
                resolved += 1
        if resolved:
            logger.info("[STATE] Bug %s: resolved %d fix commit(s)", bug.extid, resolved)
        return resolved

    def reconcile_pending(self) -> int:
        """Reconcile every Bug that still has an unresolved fix commit."""
        total = 0
        for bug in self.store.list():
            if bug.has_unresolved_fixes:
                total += self.reconcile_against_ledger(bug.key)
        return total

    def pending_fix_titles(self) -> List[str]:
        """Titles the commit feed should still look for."""
        titles = {
            fc.title
            for bug in self.store.list()
            for fc in bug.fix_commits
            if not fc.resolved
        }
        return sorted(titles)

    def attach_bisection(self, bug_id: str, kind: str, result: Optional[BisectCommit]) -> Bug:
        """
        Record a bisection outcome.

        A cause result replaces cause_commit as a whole. A fix result is
        kept as internal bookkeeping and leaves fix_commits alone. A None
        result marks the job inconclusive without touching commit fields.
        """
        if kind not in (BisectKind.CAUSE, BisectKind.FIX):
            raise InvalidInputError(f"Unknown bisection kind '{kind}'")
        job_status = BisectStatus.DONE if result is not None else BisectStatus.INCONCLUSIVE
        with self.store.transaction(bug_id) as bug:
            if kind == BisectKind.CAUSE:
                bug.bisect_cause = job_status
                if result is not None:
                    bug.cause_commit = result
            else:
                bug.bisect_fix = job_status
                if result is not None:
                    bug.fix_bisection = result
        logger.info(
            "[STATE] Bug %s: %s bisection %s%s",
            bug.extid, kind, job_status, f" → {result.hash}" if result else "",
        )
        return bug
