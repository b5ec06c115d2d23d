"""
Bug State Machine Tests
=======================
Covers:
    - Status updates: open ⇄ fixed, unknown statuses rejected
    - Fix-commit merge: declaration order, dedup, preserved hashes
    - Reconciliation: idempotent, order-independent, never rewrites a hash
    - Bisection attachment: cause overwrite, fix bookkeeping, inconclusive
    - Atomicity: a failing ledger leaves the Bug untouched
    - Validation: text that is not UTF-8 is rejected before any mutation
    - Concurrency: status updates racing reconciliation never lose a hash
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from unittest.mock import patch

from conftest import make_build, make_crash
from dashboard.core.constants import BugStatus, BisectKind, BisectStatus
from dashboard.core.errors import InvalidInputError, NotFoundError, TransientStorageError
from dashboard.engine.bug_state import merge_fix_commits
from dashboard.models.build import BuildUpload
from dashboard.models.commit import BisectCommit, Commit, FixCommit
from dashboard.models.crash import CrashDescriptor


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _ingest(state, n: int = 1) -> str:
    build = make_build()
    state.builds.upload(BuildUpload(**build))
    return state.ingestor.ingest(CrashDescriptor(**make_crash(build, n))).extid


def _titles_and_hashes(state, bug_id):
    return [(fc.title, fc.hash) for fc in state.bugs.get(bug_id).fix_commits]


CAUSE_A = BisectCommit(hash="aaaa", title="kernel: add a bug", repo="repo1", branch="branch1")
CAUSE_B = BisectCommit(hash="bbbb", title="mm: other change", repo="repo2", branch="branch2")


# ---------------------------------------------------------------------------
# 1. merge_fix_commits
# ---------------------------------------------------------------------------
class TestMergeFixCommits:

    def test_new_titles_start_unresolved(self):
        merged = merge_fix_commits([], ["a", "b"])
        assert [(fc.title, fc.hash) for fc in merged] == [("a", None), ("b", None)]

    def test_resolved_hash_preserved_for_kept_title(self):
        current = [FixCommit(title="a", hash="h1"), FixCommit(title="b")]
        merged = merge_fix_commits(current, ["b", "a", "c"])
        assert [(fc.title, fc.hash) for fc in merged] == [("b", None), ("a", "h1"), ("c", None)]

    def test_duplicate_and_blank_titles_collapse(self):
        merged = merge_fix_commits([], ["a", " ", "a", "b", ""])
        assert [fc.title for fc in merged] == ["a", "b"]

    def test_dropped_title_is_removed(self):
        merged = merge_fix_commits([FixCommit(title="a", hash="h1")], ["b"])
        assert [(fc.title, fc.hash) for fc in merged] == [("b", None)]


# ---------------------------------------------------------------------------
# 2. Status updates
# ---------------------------------------------------------------------------
class TestStatusUpdate:

    def test_open_to_fixed_and_back(self, state):
        extid = _ingest(state)
        state.state_machine.apply_status_update(extid, BugStatus.FIXED, ["a"])
        assert state.bugs.get(extid).status == BugStatus.FIXED
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a"])
        assert state.bugs.get(extid).status == BugStatus.OPEN

    def test_unknown_status_rejected_without_mutation(self, state):
        extid = _ingest(state)
        with pytest.raises(InvalidInputError, match="Unknown bug status"):
            state.state_machine.apply_status_update(extid, "invalid", ["a"])
        assert state.bugs.get(extid).fix_commits == []

    def test_unknown_bug_raises_not_found(self, state):
        with pytest.raises(NotFoundError):
            state.state_machine.apply_status_update("nope", BugStatus.OPEN, [])

    def test_update_does_not_resolve_hashes(self, state):
        extid = _ingest(state)
        state.ledger.append([Commit(hash="h1", title="a")])
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a"])
        assert _titles_and_hashes(state, extid) == [("a", None)]

    def test_accepts_internal_key(self, state):
        extid = _ingest(state)
        key = state.bugs.get(extid).key
        state.state_machine.apply_status_update(key, BugStatus.FIXED, [])
        assert state.bugs.get(extid).status == BugStatus.FIXED

    def test_non_utf8_title_rejected_without_mutation(self, state):
        extid = _ingest(state)
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a"])
        with pytest.raises(InvalidInputError, match="UTF-8"):
            state.state_machine.apply_status_update(extid, BugStatus.FIXED, ["a", chr(0xD800)])
        bug = state.bugs.get(extid)
        assert bug.status == BugStatus.OPEN
        assert [fc.title for fc in bug.fix_commits] == ["a"]


# ---------------------------------------------------------------------------
# 3. Reconciliation
# ---------------------------------------------------------------------------
class TestReconcile:

    def test_partial_resolution_keeps_order(self, state):
        extid = _ingest(state)
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a", "b"])
        state.ledger.append([Commit(hash="h1", title="a")])
        assert state.state_machine.reconcile_against_ledger(extid) == 1
        assert _titles_and_hashes(state, extid) == [("a", "h1"), ("b", None)]

    def test_reconcile_is_idempotent(self, state):
        extid = _ingest(state)
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a"])
        state.ledger.append([Commit(hash="h1", title="a")])
        state.state_machine.reconcile_against_ledger(extid)
        snapshot = state.bugs.get(extid)
        assert state.state_machine.reconcile_against_ledger(extid) == 0
        assert state.bugs.get(extid) == snapshot

    def test_resolved_hash_never_changes(self, state):
        extid = _ingest(state)
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a"])
        state.ledger.append([Commit(hash="h1", title="a")])
        state.state_machine.reconcile_pending()
        state.ledger.append([Commit(hash="h2", title="a", repo="other")])
        state.state_machine.reconcile_pending()
        state.state_machine.apply_status_update(extid, BugStatus.FIXED, ["a"])
        assert _titles_and_hashes(state, extid) == [("a", "h1")]

    def test_commits_before_status_update(self, state):
        """Ledger already has the commit when the title is declared."""
        extid = _ingest(state)
        state.ledger.append([Commit(hash="h1", title="a")])
        state.state_machine.reconcile_pending()
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a"])
        assert state.state_machine.pending_fix_titles() == ["a"]
        state.state_machine.reconcile_pending()
        assert _titles_and_hashes(state, extid) == [("a", "h1")]
        assert state.state_machine.pending_fix_titles() == []

    def test_reconcile_pending_spans_bugs(self, state):
        first = _ingest(state, 1)
        second = _ingest(state, 2)
        state.state_machine.apply_status_update(first, BugStatus.OPEN, ["a"])
        state.state_machine.apply_status_update(second, BugStatus.OPEN, ["a", "b"])
        state.ledger.append([Commit(hash="h1", title="a"), Commit(hash="h2", title="b")])
        assert state.state_machine.reconcile_pending() == 3
        assert _titles_and_hashes(state, second) == [("a", "h1"), ("b", "h2")]

    def test_ledger_failure_leaves_bug_untouched(self, state):
        extid = _ingest(state)
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a", "b"])
        state.ledger.append([Commit(hash="h1", title="a")])
        calls = []

        def flaky(title, *args, **kwargs):
            calls.append(title)
            if title == "b":
                raise TransientStorageError("ledger down")
            return Commit(hash="h1", title="a")

        with patch.object(state.ledger, "find_by_title", side_effect=flaky):
            with pytest.raises(TransientStorageError):
                state.state_machine.reconcile_against_ledger(extid)

        assert calls == ["a", "b"]
        assert _titles_and_hashes(state, extid) == [("a", None), ("b", None)]


# ---------------------------------------------------------------------------
# 4. Bisection attachment
# ---------------------------------------------------------------------------
class TestAttachBisection:

    def test_cause_sets_full_commit(self, state):
        extid = _ingest(state)
        state.state_machine.attach_bisection(extid, BisectKind.CAUSE, CAUSE_A)
        bug = state.bugs.get(extid)
        assert bug.cause_commit == CAUSE_A
        assert bug.bisect_cause == BisectStatus.DONE

    def test_cause_rerun_overwrites_entirely(self, state):
        extid = _ingest(state)
        state.state_machine.attach_bisection(extid, BisectKind.CAUSE, CAUSE_A)
        state.state_machine.attach_bisection(extid, BisectKind.CAUSE, CAUSE_B)
        assert state.bugs.get(extid).cause_commit == CAUSE_B

    def test_fix_bisection_does_not_touch_fix_commits(self, state):
        extid = _ingest(state)
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, ["a"])
        state.state_machine.attach_bisection(extid, BisectKind.FIX, CAUSE_B)
        bug = state.bugs.get(extid)
        assert [fc.title for fc in bug.fix_commits] == ["a"]
        assert bug.fix_bisection == CAUSE_B
        assert bug.cause_commit is None

    def test_inconclusive_keeps_existing_commit(self, state):
        extid = _ingest(state)
        state.state_machine.attach_bisection(extid, BisectKind.CAUSE, CAUSE_A)
        state.state_machine.attach_bisection(extid, BisectKind.CAUSE, None)
        bug = state.bugs.get(extid)
        assert bug.cause_commit == CAUSE_A
        assert bug.bisect_cause == BisectStatus.INCONCLUSIVE

    def test_bisection_never_changes_status(self, state):
        extid = _ingest(state)
        state.state_machine.attach_bisection(extid, BisectKind.CAUSE, CAUSE_A)
        assert state.bugs.get(extid).status == BugStatus.OPEN

    def test_unknown_kind_rejected(self, state):
        extid = _ingest(state)
        with pytest.raises(InvalidInputError):
            state.state_machine.attach_bisection(extid, "bisect_everything", CAUSE_A)


# ---------------------------------------------------------------------------
# 5. Concurrent writers on one Bug
# ---------------------------------------------------------------------------
class TestConcurrentWriters:

    def test_status_updates_and_reconciliation_do_not_interleave(self, state):
        extid = _ingest(state)
        titles = ["a", "b", "c"]
        state.state_machine.apply_status_update(extid, BugStatus.OPEN, titles)
        state.ledger.append([Commit(hash=f"h-{t}", title=t) for t in titles])

        real_find = state.ledger.find_by_title

        def slow_find(title, *args, **kwargs):
            # Widen the gap between reading the Bug and committing it.
            time.sleep(0.001)
            return real_find(title, *args, **kwargs)

        rounds = 20
        barrier = threading.Barrier(2 * rounds)

        def update(i):
            barrier.wait()
            status = BugStatus.FIXED if i % 2 else BugStatus.OPEN
            state.state_machine.apply_status_update(extid, status, titles)

        def reconcile(_):
            barrier.wait()
            return state.state_machine.reconcile_against_ledger(extid)

        with patch.object(state.ledger, "find_by_title", side_effect=slow_find):
            with ThreadPoolExecutor(max_workers=2 * rounds) as pool:
                updates = [pool.submit(update, i) for i in range(rounds)]
                reconciles = [pool.submit(reconcile, i) for i in range(rounds)]
                for future in updates:
                    future.result()
                resolved = sum(future.result() for future in reconciles)

        # Each title is resolved exactly once; an update that overwrote a
        # reconciliation would force a second resolution.
        assert resolved == len(titles)
        assert _titles_and_hashes(state, extid) == [("a", "h-a"), ("b", "h-b"), ("c", "h-c")]
