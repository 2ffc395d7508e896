"""
Runtime configuration.

Everything is resolved through small functions instead of module constants,
so tests (and the CLI's --api-url flag) can override the values:

    WEEKPLANNER_API_URL   base URL of the planning backend
    WEEKPLANNER_TIMEOUT   request timeout in seconds
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 30.0


def api_base_url(override: str | None = None) -> str:
    """
    Return the API base URL without a trailing slash.

    Priority: explicit override > WEEKPLANNER_API_URL > default.
    """
    url = (override or os.environ.get("WEEKPLANNER_API_URL") or DEFAULT_API_URL).strip()
    return url.rstrip("/")


def request_timeout() -> float:
    """
    Request timeout in seconds. Invalid or non-positive values fall back to the default.
    """
    raw = os.environ.get("WEEKPLANNER_TIMEOUT", "").strip()
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT
    return value if value > 0 else DEFAULT_TIMEOUT


def default_export_dir() -> Path:
    # Default to user's Downloads folder (works on Windows/macOS/Linux)
    return Path.home() / "Downloads"
