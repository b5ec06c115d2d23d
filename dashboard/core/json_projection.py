"""
JSON Projection
===============
THE SINGLE SOURCE OF TRUTH for the external JSON read contract.

STRICT DETERMINISM CONTRACT:
  - This module NEVER reads environment variables or the clock.
  - This module NEVER mutates the Bugs it renders.
  - Given the same Bug state, it ALWAYS returns the exact same bytes.

OUTPUT FORMAT (byte-for-byte):
  - Tab indentation, ": " between key and value, "," line endings.
  - Keys in the fixed order below, "version" first.
  - "&", "<", ">", U+2028 and U+2029 are written as \\uXXXX escapes so the
    output can be embedded in HTML. Other non-ASCII text stays UTF-8.

Bug document:
    version       — always JSON_SCHEMA_VERSION
    title         — always
    cause-commit  — only if a cause bisection attached one; always the full
                    {title, hash, repo, branch}
    fix-commits   — only if at least one is declared; each {title, hash?},
                    hash omitted while unresolved
    crashes       — one entry per crash, in report order:
                    syz-reproducer?, c-reproducer?, kernel-config,
                    kernel-source-commit, syzkaller-git, syzkaller-commit

Group document:
    version       — always JSON_SCHEMA_VERSION
    Bugs          — [{title, link}, ...], or null when the group is empty

Absent optional fields are OMITTED, never null. The one null in the contract
is an empty group's "Bugs".
"""
import json
from typing import Any, Dict, List, Optional, Sequence

from dashboard.core.constants import JSON_SCHEMA_VERSION
from dashboard.models.bug import Bug
from dashboard.models.commit import BisectCommit, FixCommit
from dashboard.models.crash import Crash

# Characters escaped on top of standard JSON string escaping.
_HTML_UNSAFE = ("&", "<", ">", chr(0x2028), chr(0x2029))


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------
def escape_html(text: str) -> str:
    """Replace HTML-sensitive characters with \\uXXXX escapes."""
    for ch in _HTML_UNSAFE:
        if ch in text:
            text = text.replace(ch, "\\u%04x" % ord(ch))
    return text


def encode(document: Any) -> bytes:
    """
    Serialize a document in the contract's byte format.

    The HTML escaping runs on the encoded text. It is safe there because
    none of the escaped characters can appear outside a JSON string.
    """
    text = json.dumps(document, indent="\t", ensure_ascii=False)
    return escape_html(text).encode("utf-8")


# ---------------------------------------------------------------------------
# Bug document
# ---------------------------------------------------------------------------
def bug_link(extid: str) -> str:
    return f"/bug?extid={extid}"


def _cause_commit(commit: BisectCommit) -> Dict[str, str]:
    return {
        "title": commit.title,
        "hash": commit.hash,
        "repo": commit.repo,
        "branch": commit.branch,
    }


def _fix_commit(commit: FixCommit) -> Dict[str, str]:
    entry = {"title": commit.title}
    if commit.hash is not None:
        entry["hash"] = commit.hash
    return entry


def _crash(crash: Crash) -> Dict[str, str]:
    entry: Dict[str, str] = {}
    if crash.repro_syz is not None:
        entry["syz-reproducer"] = crash.repro_syz.url
    if crash.repro_c is not None:
        entry["c-reproducer"] = crash.repro_c.url
    entry["kernel-config"] = crash.build.kernel_config.url
    entry["kernel-source-commit"] = crash.build.kernel_commit
    entry["syzkaller-git"] = crash.build.syzkaller_git
    entry["syzkaller-commit"] = crash.build.syzkaller_commit
    return entry


def bug_document(bug: Bug) -> Dict[str, Any]:
    """Build the ordered dict rendered by render_bug()."""
    doc: Dict[str, Any] = {
        "version": JSON_SCHEMA_VERSION,
        "title": bug.title,
    }
    if bug.cause_commit is not None:
        doc["cause-commit"] = _cause_commit(bug.cause_commit)
    if bug.fix_commits:
        doc["fix-commits"] = [_fix_commit(fc) for fc in bug.fix_commits]
    doc["crashes"] = [_crash(c) for c in bug.crashes]
    return doc


def render_bug(bug: Bug) -> bytes:
    return encode(bug_document(bug))


# ---------------------------------------------------------------------------
# Group document
# ---------------------------------------------------------------------------
def group_document(bugs: Sequence[Bug]) -> Dict[str, Any]:
    entries: Optional[List[Dict[str, str]]] = None
    if bugs:
        entries = [{"title": b.title, "link": bug_link(b.extid)} for b in bugs]
    return {
        "version": JSON_SCHEMA_VERSION,
        "Bugs": entries,
    }


def render_group(bugs: Sequence[Bug]) -> bytes:
    return encode(group_document(bugs))
