"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    SYZKALLER_REPO_URL   — Base URL of the syzkaller source repository; the
                           per-build "syzkaller-git" link is derived from it
    REPORTING_NAME       — Name of the reporting stage; mixed into external bug ids
    EXTID_LENGTH         — Length of the external bug id in hex chars (default: 20)
    BISECT_RETRY_LIMIT   — Attempts for linking a bisection result (default: 3)
    BISECT_RETRY_DELAY   — Initial backoff in seconds between attempts (default: 0.5)
    LOG_LEVEL            — Root log level name (default: INFO)
    LOG_DIR              — Directory for the dated log file (default: logs)
    ENABLE_FILE_LOGGING  — Also log to LOG_DIR (default: true)

External Identifier Stability:
    REPORTING_NAME and EXTID_LENGTH are part of every external link handed
    out by the read API. Changing either one changes every extid, so both
    must stay fixed for the lifetime of a deployment.
"""
import os
from dotenv import load_dotenv

load_dotenv()

SYZKALLER_REPO_URL = os.getenv("SYZKALLER_REPO_URL", "https://github.com/google/syzkaller")
REPORTING_NAME = os.getenv("REPORTING_NAME", "reporting1")
EXTID_LENGTH = int(os.getenv("EXTID_LENGTH", 20))

# Bisection linking
BISECT_RETRY_LIMIT = int(os.getenv("BISECT_RETRY_LIMIT", 3))
BISECT_RETRY_DELAY = float(os.getenv("BISECT_RETRY_DELAY", 0.5))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")
ENABLE_FILE_LOGGING = os.getenv("ENABLE_FILE_LOGGING", "true").lower() == "true"
