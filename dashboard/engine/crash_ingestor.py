"""
Crash Ingestor
==============
ReportCrash: resolve (or create) the owning Bug of a crash and append it.

Order of work:
    1. Check the descriptor text     — InvalidInputError if it is not UTF-8
    2. Look up the Build             — NotFoundError if it was never uploaded
    3. Store the artifacts           — TransientStorageError aborts here,
                                       before any Bug is touched
    4. Derive the dedup key          — namespace + title
    5. Open or create the Bug        — at most one Bug per key
    6. Append the Crash              — committed together with the Bug

Only artifact references land on the Crash, never the payloads.
"""
import logging
import uuid
from datetime import datetime, timezone

from dashboard.core.constants import ArtifactTag, BugStatus
from dashboard.models.bug import Bug, BugRef
from dashboard.models.crash import Crash, CrashDescriptor
from dashboard.services.artifact_store import ArtifactResolver
from dashboard.services.bug_store import BugStore
from dashboard.services.build_registry import BuildRegistry
from dashboard.utils.bug_hash import generate_dedup_key, generate_extid
from dashboard.utils.text import require_utf8

logger = logging.getLogger(__name__)


class CrashIngestor:

    def __init__(self, builds: BuildRegistry, artifacts: ArtifactResolver, store: BugStore) -> None:
        self.builds = builds
        self.artifacts = artifacts
        self.store = store

    def ingest(self, descriptor: CrashDescriptor) -> BugRef:
        require_utf8(descriptor.model_dump())
        build = self.builds.get(descriptor.build_id)

        repro_syz = self.artifacts.store_optional(ArtifactTag.REPRO_SYZ, descriptor.repro_syz)
        repro_c = self.artifacts.store_optional(ArtifactTag.REPRO_C, descriptor.repro_c)
        log = self.artifacts.store_optional(ArtifactTag.CRASH_LOG, descriptor.log)
        report = self.artifacts.store_optional(ArtifactTag.CRASH_REPORT, descriptor.report)

        key = generate_dedup_key(build.namespace, descriptor.title)
        now = datetime.now(timezone.utc)

        def _new_bug() -> Bug:
            return Bug(
                key=key,
                extid=generate_extid(key),
                namespace=build.namespace,
                title=descriptor.title,
                status=BugStatus.OPEN,
                first_time=now,
            )

        with self.store.open_or_create(key, _new_bug) as (bug, created):
            bug.crashes.append(Crash(
                id=uuid.uuid4().hex[:16],
                title=descriptor.title,
                bug_key=key,
                build=build,
                repro_syz=repro_syz,
                repro_c=repro_c,
                log=log,
                report=report,
                reported_at=now,
            ))
            bug.last_time = now

        logger.info(
            "[INGEST] Crash '%s' from build %s → bug %s (%s, %d crash(es))",
            descriptor.title, build.id, bug.extid,
            "new" if created else "existing", bug.num_crashes,
        )
        return BugRef(key=key, extid=bug.extid, created=created)
