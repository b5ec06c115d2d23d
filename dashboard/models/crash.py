"""
Crash Models
============
CrashDescriptor is what a fuzzing manager reports; Crash is what gets stored
on the owning Bug once the artifacts have been handed to the resolver.

A Crash is immutable after ingestion and embeds its Build, so rendering a
Bug never needs a second lookup.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, field_validator

from .artifact import ArtifactRef
from .build import Build


class CrashDescriptor(BaseModel):
    build_id: str
    title: str
    repro_syz: Optional[str] = None
    repro_c: Optional[str] = None
    log: Optional[str] = None
    report: Optional[str] = None

    @field_validator("build_id", "title")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty or whitespace-only")
        return v.strip()


class Crash(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    bug_key: str
    build: Build
    repro_syz: Optional[ArtifactRef] = None
    repro_c: Optional[ArtifactRef] = None
    log: Optional[ArtifactRef] = None
    report: Optional[ArtifactRef] = None
    reported_at: datetime
