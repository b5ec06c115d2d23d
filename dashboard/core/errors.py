"""
Error Taxonomy
==============
Every core operation either succeeds or raises one of these.

    NotFoundError          — referenced Bug / Build / artifact is absent.
                             Surfaced to the caller, never retried silently.
    TransientStorageError  — artifact store or ledger unavailable. The current
                             attempt fails with no partial state committed;
                             the caller may retry.
    InvalidInputError      — malformed input (crash descriptor, status,
                             job kind). Raised before any Bug mutation.

Creation races on a dedup key are resolved inside the bug store and have no
exception of their own.
"""


class DashboardError(Exception):
    """Base class for all engine errors."""


class NotFoundError(DashboardError):
    def __init__(self, kind: str, ident: str) -> None:
        super().__init__(f"{kind} '{ident}' not found")
        self.kind = kind
        self.ident = ident


class TransientStorageError(DashboardError):
    pass


class InvalidInputError(DashboardError, ValueError):
    pass
