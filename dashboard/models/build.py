"""
Build Model
===========
Immutable provenance of one fuzzing build upload.

Fields:
    id                  — build identifier chosen by the uploader
    namespace           — dashboard namespace the build (and its crashes) belong to
    manager             — fuzzing manager that produced the build
    kernel_repo         — kernel repository URL
    kernel_branch       — kernel branch
    kernel_commit       — kernel source commit hash
    kernel_commit_title — title of that commit
    syzkaller_commit    — syzkaller source commit hash
    syzkaller_git       — syzkaller source URL for syzkaller_commit
    kernel_config       — reference to the stored kernel config text

BuildUpload is the wire shape of UploadBuild; it carries the config payload
inline, the registry swaps it for an ArtifactRef before a Build is created.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator

from .artifact import ArtifactRef


class Build(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    namespace: str
    manager: str = ""
    kernel_repo: str = ""
    kernel_branch: str = ""
    kernel_commit: str
    kernel_commit_title: str = ""
    syzkaller_commit: str
    syzkaller_git: str
    kernel_config: ArtifactRef


class BuildUpload(BaseModel):
    id: str
    namespace: str
    manager: str = ""
    kernel_repo: str = ""
    kernel_branch: str = ""
    kernel_commit: str
    kernel_commit_title: str = ""
    syzkaller_commit: str
    kernel_config: Optional[str] = ""

    @field_validator("id", "namespace", "kernel_commit", "syzkaller_commit")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty or whitespace-only")
        return v.strip()
