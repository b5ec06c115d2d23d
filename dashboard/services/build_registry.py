"""
Build Registry
Idempotent registration of build provenance (UploadBuild).

The kernel config payload is stored through the ArtifactResolver and only the
reference is kept. Re-uploading a known build id keeps the first record.
"""
import logging
import threading
from typing import List

from dashboard.core.config import SYZKALLER_REPO_URL
from dashboard.core.constants import ArtifactTag
from dashboard.core.errors import NotFoundError
from dashboard.models.build import Build, BuildUpload
from dashboard.services.artifact_store import ArtifactResolver
from dashboard.utils.text import require_utf8

logger = logging.getLogger(__name__)


def syzkaller_git_url(syzkaller_commit: str, repo_url: str = SYZKALLER_REPO_URL) -> str:
    return f"{repo_url.rstrip('/')}/commits/{syzkaller_commit}"


class BuildRegistry:

    def __init__(self, artifacts: ArtifactResolver, syzkaller_repo_url: str = SYZKALLER_REPO_URL) -> None:
        self.artifacts = artifacts
        self.syzkaller_repo_url = syzkaller_repo_url
        self._lock = threading.Lock()
        self._builds: dict[str, Build] = {}

    def upload(self, upload: BuildUpload) -> Build:
        require_utf8(upload.model_dump())
        existing = self._builds.get(upload.id)
        if existing is not None:
            logger.debug("[BUILD] Build %s already registered", upload.id)
            return existing

        # Store the config before taking the lock, a failure leaves no build behind.
        config_ref = self.artifacts.store(ArtifactTag.KERNEL_CONFIG, upload.kernel_config or "")
        build = Build(
            id=upload.id,
            namespace=upload.namespace,
            manager=upload.manager,
            kernel_repo=upload.kernel_repo,
            kernel_branch=upload.kernel_branch,
            kernel_commit=upload.kernel_commit,
            kernel_commit_title=upload.kernel_commit_title,
            syzkaller_commit=upload.syzkaller_commit,
            syzkaller_git=syzkaller_git_url(upload.syzkaller_commit, self.syzkaller_repo_url),
            kernel_config=config_ref,
        )
        with self._lock:
            winner = self._builds.setdefault(build.id, build)
        if winner is build:
            logger.info(
                "[BUILD] Registered build %s (ns=%s, kernel=%s)",
                build.id, build.namespace, build.kernel_commit,
            )
        return winner

    def get(self, build_id: str) -> Build:
        build = self._builds.get(build_id)
        if build is None:
            raise NotFoundError("build", build_id)
        return build

    def namespaces(self) -> List[str]:
        with self._lock:
            return sorted({b.namespace for b in self._builds.values()})

    def __len__(self) -> int:
        return len(self._builds)
