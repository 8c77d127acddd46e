"""
focusflow/session/remote.py - Remote session-log and insight clients.

The hosted backend is a Supabase project: sessions go to the PostgREST
``timer_sessions`` table, insights come from the ``ai-coach-generate-insight``
edge function. Both clients raise SessionLogError on failure; callers run
them on the background worker, which logs and retries.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

log = logging.getLogger(__name__)

CONNECT_TIMEOUT = 5  # seconds
SESSIONS_PATH = "/rest/v1/timer_sessions"
INSIGHT_PATH = "/functions/v1/ai-coach-generate-insight"


class SessionLogError(RuntimeError):
    """A remote call failed (network, HTTP status or bad payload)."""


class SessionLog(Protocol):
    def log_start(self, session: dict) -> Optional[str]: ...

    def update_session(self, session_id: str, patch: dict) -> None: ...


class InsightGenerator(Protocol):
    def generate(self, kind: str, context: dict, session_id: Optional[str] = None) -> Optional[dict]: ...


class NullSessionLog:
    """Used when no backend is configured: nothing is sent, no id comes back."""

    def log_start(self, session: dict) -> Optional[str]:
        return None

    def update_session(self, session_id: str, patch: dict) -> None:
        return None


# ---------------------------------------------------------------------------
# HTTP plumbing
# ---------------------------------------------------------------------------

def _request_json(
    url: str,
    method: str,
    headers: dict[str, str],
    payload: Optional[dict] = None,
    timeout: float = CONNECT_TIMEOUT,
) -> Any:
    data = json.dumps(payload).encode("utf-8") if payload is not None else None
    req = Request(url, data=data, headers=headers, method=method)
    try:
        with urlopen(req, timeout=timeout) as resp:
            raw = resp.read().decode("utf-8", errors="replace")
    except HTTPError as exc:
        raise SessionLogError(f"{method} {url} returned HTTP {exc.code}: {exc.reason}") from exc
    except URLError as exc:
        raise SessionLogError(f"Could not reach {url}: {exc.reason}") from exc
    except OSError as exc:
        raise SessionLogError(f"{method} {url} failed: {exc}") from exc
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SessionLogError(f"Invalid JSON from {url}: {exc}") from exc


class _SupabaseClient:
    def __init__(self, base_url: str, api_key: str, timeout: float = CONNECT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        headers.update(extra)
        return headers


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

class HttpSessionLog(_SupabaseClient):
    """timer_sessions rows: start_time, end_time, duration_seconds, mode,
    pauses_count, task_id, task_title, completed, user_id."""

    def log_start(self, session: dict) -> Optional[str]:
        rows = _request_json(
            self.base_url + SESSIONS_PATH,
            "POST",
            self._headers(Prefer="return=representation"),
            session,
            self.timeout,
        )
        if isinstance(rows, list) and rows and isinstance(rows[0], dict):
            session_id = rows[0].get("id")
            return str(session_id) if session_id else None
        if isinstance(rows, dict) and rows.get("id"):
            return str(rows["id"])
        log.warning("Session insert returned no id: %r", rows)
        return None

    def update_session(self, session_id: str, patch: dict) -> None:
        url = f"{self.base_url}{SESSIONS_PATH}?id=eq.{quote(str(session_id))}"
        _request_json(url, "PATCH", self._headers(Prefer="return=minimal"), patch, self.timeout)


class HttpInsightGenerator(_SupabaseClient):
    def generate(self, kind: str, context: dict, session_id: Optional[str] = None) -> Optional[dict]:
        body = {"type": kind, "context": context, "session_id": session_id}
        result = _request_json(self.base_url + INSIGHT_PATH, "POST", self._headers(), body, self.timeout)
        return result if isinstance(result, dict) else None


def make_clients(base_url: str, api_key: str) -> tuple[SessionLog, Optional[InsightGenerator]]:
    """Build the clients for a configured backend, or null ones when unset."""
    if not base_url:
        return NullSessionLog(), None
    if not api_key:
        log.warning("session_log.url is set but no API key; remote session log disabled")
        return NullSessionLog(), None
    return HttpSessionLog(base_url, api_key), HttpInsightGenerator(base_url, api_key)
