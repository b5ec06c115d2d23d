"""
Constants
Contract values shared by the engine and the read API: schema version,
bug statuses, artifact tags and bisection job kinds.
"""
JSON_SCHEMA_VERSION = 1
JSON_CONTENT_TYPE = "application/json"


class BugStatus:
    """Bug lifecycle states handled by the state machine."""
    OPEN  = "open"
    FIXED = "fixed"


BUG_STATUSES: set[str] = {BugStatus.OPEN, BugStatus.FIXED}


class ArtifactTag:
    """Tags of the text artifacts. Each tag is its own reference namespace."""
    KERNEL_CONFIG = "KernelConfig"
    REPRO_SYZ     = "ReproSyz"
    REPRO_C       = "ReproC"
    CRASH_LOG     = "CrashLog"
    CRASH_REPORT  = "CrashReport"


ARTIFACT_TAGS: set[str] = {
    ArtifactTag.KERNEL_CONFIG,
    ArtifactTag.REPRO_SYZ,
    ArtifactTag.REPRO_C,
    ArtifactTag.CRASH_LOG,
    ArtifactTag.CRASH_REPORT,
}


class BisectKind:
    CAUSE = "cause"
    FIX   = "fix"


# Job type names as sent by the bisection runner → kind
JOB_KINDS: dict[str, str] = {
    "bisect_cause": BisectKind.CAUSE,
    "bisect_fix":   BisectKind.FIX,
    BisectKind.CAUSE: BisectKind.CAUSE,
    BisectKind.FIX:   BisectKind.FIX,
}


class BisectStatus:
    NONE         = "none"
    DONE         = "done"
    INCONCLUSIVE = "inconclusive"
