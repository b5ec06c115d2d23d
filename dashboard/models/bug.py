"""
Bug Model
=========
Pydantic model for the aggregate entity: one defect, many crashes.

Fields:
    key             — internal id; the dedup hash of namespace + title
    extid           — external stable id used in links and reporting
    namespace       — namespace of the builds that produced the crashes
    title           — crash title shared by every crash of this bug
    status          — "open" | "fixed" (see BugStatus)
    seq             — creation order across the store, used for stable listing
    fix_commits     — declared fixing commits, in declaration order
    cause_commit    — set by a conclusive cause bisection
    fix_bisection   — set by a conclusive fix bisection (not rendered)
    bisect_cause    — "none" | "done" | "inconclusive"
    bisect_fix      — "none" | "done" | "inconclusive"
    crashes         — every Crash of this bug, in report order
    reported        — True once handed out by the reporting poll
    first_time      — time of the first crash
    last_time       — time of the latest crash

Bug records are only changed through BugStore transactions; a committed Bug
is never mutated in place.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from dashboard.core.constants import BugStatus, BisectStatus
from .commit import BisectCommit, FixCommit
from .crash import Crash


class Bug(BaseModel):
    key: str
    extid: str
    namespace: str
    title: str
    status: str = BugStatus.OPEN
    seq: int = 0

    fix_commits: List[FixCommit] = []
    cause_commit: Optional[BisectCommit] = None
    fix_bisection: Optional[BisectCommit] = None
    bisect_cause: str = BisectStatus.NONE
    bisect_fix: str = BisectStatus.NONE

    crashes: List[Crash] = []
    reported: bool = False
    first_time: Optional[datetime] = None
    last_time: Optional[datetime] = None

    @property
    def num_crashes(self) -> int:
        return len(self.crashes)

    @property
    def has_unresolved_fixes(self) -> bool:
        return any(not fc.resolved for fc in self.fix_commits)


class BugRef(BaseModel):
    """Result of ingesting a crash: which bug it landed on."""
    key: str
    extid: str
    created: bool = False
