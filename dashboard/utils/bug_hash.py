"""
Bug Hash Utility
================
Generates the identifiers a Bug is known by.

Dedup Key:
    sha1(namespace + "-" + title)
    Two crashes with the same title reported from builds of the same
    namespace belong to the same Bug. This is also the Bug's internal key.

External ID:
    sha1(dedup_key + "-" + reporting_name), truncated to EXTID_LENGTH
    Stable id handed out in links and reports. Derived, never random, so a
    replayed ingestion maps to the same extid.
"""
import hashlib

from dashboard.core.config import EXTID_LENGTH, REPORTING_NAME


def generate_dedup_key(namespace: str, title: str) -> str:
    """
    Generate the dedup key of a crash.

    Parameters
    ----------
    namespace : str
        Namespace of the build the crash was found on.
    title : str
        Crash title as produced by the report parser.

    Returns
    -------
    str
        40-character hex key.
    """
    raw = f"{namespace}-{title}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def generate_extid(dedup_key: str, reporting_name: str = REPORTING_NAME) -> str:
    """Derive the external id of the Bug stored under `dedup_key`."""
    raw = f"{dedup_key}-{reporting_name}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:EXTID_LENGTH]
