"""
Client for the application tracking service (HTTP/JSON).

The core never persists anything itself: every recorded attempt goes to the
service, and the service answers "did we already apply to this job?".
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone
from typing import Any
from urllib.parse import quote

import requests

from easyapply.log import get_logger
from easyapply.models import ApplicationOutcome
from easyapply.retry import retry

log = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:5070"


@dataclass(frozen=True)
class ConnectionStatus:
    ok: bool
    message: str = ""
    count: int = 0


def _field(data: dict[str, Any], name: str, default: Any = None) -> Any:
    """Accept both PascalCase and camelCase keys."""
    for key in (name, name[0].lower() + name[1:]):
        if key in data:
            return data[key]
    return default


def outcome_payload(outcome: ApplicationOutcome) -> dict[str, Any]:
    listing = outcome.listing
    applied = outcome.completed_at.astimezone(timezone.utc)
    return {
        "JobTitle": listing.title,
        "Company": listing.company,
        "JobId": listing.job_id,
        "Url": listing.url,
        "Provider": listing.provider.value,
        "AppliedDate": applied.isoformat().replace("+00:00", "Z"),
        "Success": outcome.success,
    }


class TrackingClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    @retry(max_attempts=3, base_delay=1.0, retryable=(requests.ConnectionError, requests.Timeout))
    def _fetch_status(self) -> Any:
        resp = self.session.get(self._url("api/jobs/test-connection"), timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def test_connection(self) -> ConnectionStatus:
        try:
            data = self._fetch_status()
        except (requests.RequestException, ValueError) as exc:
            log.error("Tracking service unreachable at %s: %s", self.base_url, exc)
            return ConnectionStatus(False, str(exc))
        if not isinstance(data, dict):
            return ConnectionStatus(False, f"unexpected response: {data!r}"[:200])
        status = ConnectionStatus(
            ok=_field(data, "Success") is True,
            message=str(_field(data, "Message", "") or ""),
            count=int(_field(data, "Count", 0) or 0),
        )
        if not status.ok:
            log.error("Tracking service reported a problem: %s", status.message or "no message")
        return status

    def is_previously_applied(self, job_id: str) -> bool:
        """True only on an explicit yes; any failure counts as not applied."""
        url = self._url(f"api/jobs/check/{quote(job_id, safe='')}")
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            log.warning("Applied-check failed for %s (%s); treating as not applied", job_id, exc)
            return False
        if not resp.ok:
            log.warning(
                "Applied-check for %s returned HTTP %d; treating as not applied",
                job_id, resp.status_code,
            )
            return False
        try:
            data = resp.json()
        except ValueError:
            log.warning("Applied-check for %s returned non-JSON; treating as not applied", job_id)
            return False
        return data is True or str(data).strip().lower() == "true"

    def record_outcome(self, outcome: ApplicationOutcome) -> bool:
        payload = outcome_payload(outcome)
        try:
            resp = self.session.post(self._url("api/jobs"), json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            log.error("Could not record %s: %s", outcome.listing, exc)
            return False
        if not resp.ok:
            log.error(
                "Tracking service rejected %s: HTTP %d %s",
                outcome.listing, resp.status_code, (resp.text or "")[:200],
            )
            return False
        log.debug("Recorded %s (success=%s)", outcome.listing, outcome.success)
        return True
