"""
Bisection Result Linker
=======================
Maps a bisection job completion onto the owning Bug.

    - Job types "bisect_cause" / "bisect_fix" map to cause / fix.
    - A conclusive cause result, once attached, is also appended to the
      Commit Ledger with its repo/branch, so later title lookups can see it.
      A dropped result leaves the ledger alone.
    - TransientStorageError is retried with exponential backoff.
    - A Bug that does not exist is logged and dropped; the job runner is
      never handed an error for it.

Completions are delivered at-least-once. Linking the same result twice
leaves the Bug as it was after the first time.
"""
import logging
import time
from typing import Callable, Optional

from dashboard.core.config import BISECT_RETRY_DELAY, BISECT_RETRY_LIMIT
from dashboard.core.constants import JOB_KINDS, BisectKind
from dashboard.core.errors import InvalidInputError, NotFoundError, TransientStorageError
from dashboard.engine.bug_state import BugStateMachine
from dashboard.models.commit import BisectCommit, Commit
from dashboard.services.commit_ledger import CommitLedger
from dashboard.utils.text import require_utf8

logger = logging.getLogger(__name__)


def resolve_job_kind(job_kind: str) -> str:
    kind = JOB_KINDS.get(job_kind)
    if kind is None:
        raise InvalidInputError(
            f"Unknown bisection job type '{job_kind}'. Allowed values: {sorted(JOB_KINDS)}"
        )
    return kind


class BisectionLinker:

    def __init__(
        self,
        state: BugStateMachine,
        ledger: CommitLedger,
        retry_limit: int = BISECT_RETRY_LIMIT,
        retry_delay: float = BISECT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.state = state
        self.ledger = ledger
        self.retry_limit = max(1, retry_limit)
        self.retry_delay = retry_delay
        self._sleep = sleep

    def on_job_complete(self, bug_id: str, job_kind: str, commit_info: Optional[BisectCommit]) -> bool:
        """
        Link a finished bisection job to its Bug.

        Parameters
        ----------
        bug_id : str
            Internal key or extid of the Bug the job ran for.
        job_kind : str
            "bisect_cause" / "bisect_fix" (or "cause" / "fix").
        commit_info : Optional[BisectCommit]
            The single commit found, or None for an inconclusive job.

        Returns
        -------
        bool
            True if the result was attached, False if it was dropped.

        Raises
        ------
        InvalidInputError
            Unknown job type, or commit text that is not UTF-8.
        TransientStorageError
            Storage still failing after the last retry.
        """
        kind = resolve_job_kind(job_kind)
        if commit_info is not None:
            require_utf8(commit_info.model_dump())

        if not self._attach(bug_id, kind, commit_info):
            return False

        if kind == BisectKind.CAUSE and commit_info is not None:
            self.ledger.append([Commit(
                hash=commit_info.hash,
                title=commit_info.title,
                repo=commit_info.repo,
                branch=commit_info.branch,
            )])
        return True

    def _attach(self, bug_id: str, kind: str, commit_info: Optional[BisectCommit]) -> bool:
        delay = self.retry_delay
        for attempt in range(1, self.retry_limit + 1):
            try:
                self.state.attach_bisection(bug_id, kind, commit_info)
                return True
            except NotFoundError:
                logger.warning("[BISECT] Dropping %s result for unknown bug %s", kind, bug_id)
                return False
            except TransientStorageError as exc:
                if attempt == self.retry_limit:
                    logger.error(
                        "[BISECT] Giving up on %s result for bug %s after %d attempt(s): %s",
                        kind, bug_id, attempt, exc,
                    )
                    raise
                logger.warning(
                    "[BISECT] Attempt %d/%d for bug %s failed: %s (retrying in %.1fs)",
                    attempt, self.retry_limit, bug_id, exc, delay,
                )
                self._sleep(delay)
                delay *= 2
        return False  # pragma: no cover
