"""
Dashboard Client
================
Thin httpx wrapper used by the collaborators that feed the dashboard:
fuzzing managers (builds, crashes), the reporter (poll, status updates),
the commit poller (commits, commit poll) and the bisection runner (job done).

Any httpx.Client works, including fastapi's TestClient:

    client = DashClient(httpx.Client(base_url="http://127.0.0.1:8000"))
    client.upload_build({...})
    bug_id = client.report_crash({...})["bug_id"]

Write calls raise httpx.HTTPStatusError on a non-2xx answer. Read calls
return the raw body so callers can compare the contract bytes.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class DashClient:

    def __init__(self, http: httpx.Client) -> None:
        self.http = http

    def _post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        response = self.http.post(path, json=payload or {})
        response.raise_for_status()
        return response.json()

    # --- fuzzing manager ---
    def upload_build(self, build: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/api/upload_build", build)

    def report_crash(self, crash: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/api/report_crash", crash)

    # --- reporter ---
    def poll_bugs(self) -> List[Dict[str, Any]]:
        return self._post("/api/reporting_poll_bugs")["reports"]

    def poll_bug(self) -> Dict[str, Any]:
        """Poll and expect exactly one new report."""
        reports = self.poll_bugs()
        if len(reports) != 1:
            raise LookupError(f"expected 1 new bug report, got {len(reports)}")
        return reports[0]

    def reporting_update(self, bug_id: str, status: str, fix_commits: Optional[List[str]] = None) -> Dict[str, Any]:
        return self._post("/api/reporting_update", {
            "id": bug_id,
            "status": status,
            "fix_commits": fix_commits or [],
        })

    # --- commit poller ---
    def upload_commits(self, commits: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._post("/api/upload_commits", {"commits": commits})

    def commit_poll(self) -> Dict[str, Any]:
        return self._post("/api/commit_poll")

    # --- bisection runner ---
    def job_done(self, job: Dict[str, Any]) -> Dict[str, Any]:
        return self._post("/api/job_done", job)

    # --- read API ---
    def get(self, url: str) -> bytes:
        return self.http.get(url).content

    def content_type(self, url: str) -> str:
        return self.http.get(url).headers.get("content-type", "")
