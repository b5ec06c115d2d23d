"""
Dashboard State
Holds one instance of every service and engine component, wired together.

The API routers receive it through the `get_state` dependency; tests swap in
a fresh instance with `app.dependency_overrides[get_state]`.
"""
import threading
from dataclasses import dataclass
from typing import Optional

from dashboard.engine.bisection_linker import BisectionLinker
from dashboard.engine.bug_state import BugStateMachine
from dashboard.engine.crash_ingestor import CrashIngestor
from dashboard.services.artifact_store import ArtifactResolver, BlobStore, InMemoryBlobStore
from dashboard.services.bug_store import BugStore
from dashboard.services.build_registry import BuildRegistry
from dashboard.services.commit_ledger import CommitLedger


@dataclass
class DashboardState:
    artifacts: ArtifactResolver
    builds: BuildRegistry
    ledger: CommitLedger
    bugs: BugStore
    state_machine: BugStateMachine
    ingestor: CrashIngestor
    linker: BisectionLinker


def create_state(blobs: Optional[BlobStore] = None, **linker_options) -> DashboardState:
    artifacts = ArtifactResolver(blobs if blobs is not None else InMemoryBlobStore())
    builds = BuildRegistry(artifacts)
    ledger = CommitLedger()
    bugs = BugStore()
    state_machine = BugStateMachine(bugs, ledger)
    return DashboardState(
        artifacts=artifacts,
        builds=builds,
        ledger=ledger,
        bugs=bugs,
        state_machine=state_machine,
        ingestor=CrashIngestor(builds, artifacts, bugs),
        linker=BisectionLinker(state_machine, ledger, **linker_options),
    )


_state: Optional[DashboardState] = None
_state_lock = threading.Lock()


def get_state() -> DashboardState:
    """Process-wide state, created once on first use."""
    global _state
    if _state is None:
        with _state_lock:
            if _state is None:
                _state = create_state()
    return _state
