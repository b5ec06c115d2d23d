"""
Commit Models
Ledger entries from the VCS feed, and the two per-bug commit shapes.

    Commit       — one known commit (hash, title, optional repo/branch)
    FixCommit    — declared by a status update; hash set once the ledger
                   contains a commit with the same title
    BisectCommit — fully resolved commit found by bisection, never partial
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict


class Commit(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    title: str
    repo: str = ""
    branch: str = ""
    author: str = ""
    date: Optional[datetime] = None


class FixCommit(BaseModel):
    title: str
    hash: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.hash is not None


class BisectCommit(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    title: str
    repo: str
    branch: str
