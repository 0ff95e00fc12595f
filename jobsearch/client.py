"""HTTP client for the job board backend.

Only the three read endpoints the search engine needs are wrapped here:

  GET /jobs                          -> {"jobs": [...]}
  GET /search/autocomplete           -> {"jobs", "companies", "locations", "skills"}
  GET /search/autocomplete/locations -> [...]

Failures never propagate. Network errors, non-2xx statuses (including 401
from an expired session) and undecodable bodies are logged and turned
into empty results. There are no retries; re-authentication belongs to
the caller.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from jobsearch.config import SearchConfig
from jobsearch.models import JobRecord

logger = logging.getLogger(__name__)

SUGGESTION_GROUPS = ("jobs", "companies", "locations", "skills")


def empty_suggestions() -> dict[str, list[str]]:
    return {group: [] for group in SUGGESTION_GROUPS}


class BackendClient:
    """Read-only access to jobs and autocomplete suggestions."""

    def __init__(self, config: SearchConfig, session: requests.Session | None = None):
        self.config = config
        self.base_url = config.api_base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": config.user_agent,
            "Accept": "application/json",
        })

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def fetch_jobs(self, filters: dict[str, Any] | None = None) -> list[JobRecord]:
        """Fetch the job collection for a set of server-side filters.

        Records without an id are skipped.
        """
        params = {
            k: (str(v).lower() if isinstance(v, bool) else v)
            for k, v in (filters or {}).items()
            if v not in (None, "")
        }
        data = self._get_json("/jobs", params=params)
        if data is None:
            return []

        raw_jobs = data.get("jobs", []) if isinstance(data, dict) else data
        if not isinstance(raw_jobs, list):
            logger.error("Unexpected /jobs payload type: %s", type(raw_jobs).__name__)
            return []

        jobs: list[JobRecord] = []
        for raw in raw_jobs:
            if not isinstance(raw, dict):
                continue
            try:
                jobs.append(JobRecord.from_dict(raw))
            except ValueError as exc:
                logger.warning("Skipping job record: %s", exc)

        logger.info("Fetched %d jobs (filters=%s)", len(jobs), params)
        return jobs

    def autocomplete(self, query: str) -> dict[str, list[str]]:
        """Suggestions for the keyword box, grouped by kind.

        Job suggestions may come back as job objects; they are reduced to
        their titles.
        """
        if not query or len(query.strip()) < self.config.autocomplete.min_chars:
            return empty_suggestions()

        data = self._get_json(
            "/search/autocomplete",
            params={"q": query.strip(), "limit": self.config.autocomplete.request_limit},
        )
        if not isinstance(data, dict):
            return empty_suggestions()

        groups = empty_suggestions()
        for group in SUGGESTION_GROUPS:
            groups[group] = _suggestion_values(data.get(group))
        return groups

    def autocomplete_locations(self, query: str) -> list[str]:
        """Suggestions for the location box."""
        if not query or len(query.strip()) < self.config.autocomplete.min_chars:
            return []

        data = self._get_json(
            "/search/autocomplete/locations",
            params={"q": query.strip(), "limit": 10},
        )
        return _suggestion_values(data)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET and decode JSON. Returns None on any failure."""
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(
                url, params=params, timeout=self.config.request_timeout_seconds
            )
            resp.raise_for_status()
            return resp.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if status == 401:
                logger.warning("GET %s unauthorized (401), treating as empty", path)
            else:
                logger.error("GET %s failed with status %s", path, status)
        except requests.RequestException as exc:
            logger.error("GET %s failed: %s", path, exc)
        except ValueError as exc:
            logger.error("GET %s returned invalid JSON: %s", path, exc)
        return None


def _suggestion_values(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    values = []
    for item in raw:
        if isinstance(item, dict):
            item = item.get("title") or item.get("name") or item.get("value")
        if item is None:
            continue
        text = str(item).strip()
        if text:
            values.append(text)
    return values
