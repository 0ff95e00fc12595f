"""Search session: criteria lifecycle and the fetch -> filter -> sort -> page flow.

A session owns the current ``FilterCriteria``, sort key and page number
for one search results view:

  1. ``load()`` pulls the job collection from the backend using only the
     server-side subset of the criteria
  2. ``results()`` runs the client-side filter pipeline, sorts and slices
     one page
  3. ``search()`` does both and records the search in history

Changing criteria or the sort key resets the page to 1; moving between
pages or re-rendering does not.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from jobsearch import pipeline, slug
from jobsearch.client import BackendClient
from jobsearch.config import SearchConfig
from jobsearch.models import FilterCriteria, JobRecord, PaginatedResultSet, SavedSearch
from jobsearch.sorting import SORTS, paginate, sort_jobs
from jobsearch.storage import InMemoryStore, SearchHistory

logger = logging.getLogger(__name__)


class SearchSession:
    """One search results view over an in-memory job collection."""

    def __init__(
        self,
        config: SearchConfig | None = None,
        client: BackendClient | None = None,
        history: SearchHistory | None = None,
        criteria: FilterCriteria | None = None,
        jobs: list[JobRecord] | None = None,
    ):
        self.config = config or SearchConfig()
        self.client = client
        self.history = history or SearchHistory(
            InMemoryStore(),
            saved_cap=self.config.storage.saved_searches_cap,
            history_cap=self.config.storage.search_history_cap,
        )
        self.criteria = criteria or FilterCriteria()
        self.page_size = self.config.page_size
        self.page = 1
        self.jobs: list[JobRecord] = list(jobs or [])

        self._sort_key = self.config.default_sort
        if self._sort_key not in SORTS:
            raise ValueError(f"Unknown sort key {self._sort_key!r}")

    @classmethod
    def from_query_string(cls, query: str | Mapping[str, Any], **kwargs: Any) -> SearchSession:
        """Build a session whose criteria are hydrated from URL parameters."""
        return cls(criteria=FilterCriteria.from_query_params(query), **kwargs)

    # ------------------------------------------------------------------
    # Criteria, sort and page
    # ------------------------------------------------------------------

    @property
    def sort_key(self) -> str:
        return self._sort_key

    def set_sort(self, key: str) -> None:
        if key not in SORTS:
            raise ValueError(f"Unknown sort key {key!r}")
        if key != self._sort_key:
            self._sort_key = key
            self.page = 1

    def update_criteria(self, **changes: Any) -> FilterCriteria:
        """Change one or more criteria and go back to the first page."""
        for name, value in changes.items():
            if not hasattr(self.criteria, name):
                raise ValueError(f"Unknown filter criterion {name!r}")
            setattr(self.criteria, name, value)
        self.page = 1
        return self.criteria

    def clear_filters(self) -> None:
        self.criteria.clear()
        self.page = 1

    def go_to_page(self, page: int) -> None:
        self.page = page

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.page_size = page_size

    def query_params(self) -> dict[str, str]:
        return self.criteria.to_query_params()

    # ------------------------------------------------------------------
    # Running searches
    # ------------------------------------------------------------------

    def load(self) -> list[JobRecord]:
        """Fetch the job collection for the current server-side filters.

        Without a client the existing collection is kept as is.
        """
        if self.client is None:
            logger.debug("No backend client, searching %d preloaded jobs", len(self.jobs))
            return self.jobs

        filters = self.criteria.server_filters(limit=self.config.fetch_limit)
        self.jobs = self.client.fetch_jobs(filters)
        return self.jobs

    def filtered(self) -> list[JobRecord]:
        """Filtered and sorted jobs (all pages)."""
        passed = pipeline.apply(self.jobs, self.criteria)
        return sort_jobs(passed, self._sort_key)

    def results(self) -> PaginatedResultSet:
        """The current page of the filtered, sorted collection."""
        return paginate(self.filtered(), self.page, self.page_size)

    def search(self) -> PaginatedResultSet:
        """Fetch, filter, sort and paginate; resets to page 1."""
        self.load()
        self.page = 1
        self.history.record(self.criteria)
        page = self.results()
        logger.info(
            "Search %s: %d matching jobs, %d pages",
            self.query_params() or "(no filters)",
            page.total_items,
            page.total_pages,
        )
        return page

    # ------------------------------------------------------------------
    # Saved searches
    # ------------------------------------------------------------------

    def save_current_search(self) -> SavedSearch:
        return self.history.save_search(self.criteria)

    def apply_saved_search(self, entry: SavedSearch) -> FilterCriteria:
        """Replace the criteria with a saved search's keyword, location and type."""
        self.criteria.clear()
        self.criteria.keyword = entry.keyword
        self.criteria.location = entry.location
        self.criteria.job_type = entry.job_type
        self.page = 1
        return self.criteria

    # ------------------------------------------------------------------
    # Navigation helpers
    # ------------------------------------------------------------------

    def find_job(self, slug_or_id: str) -> JobRecord | None:
        """Resolve a job page slug (or bare id) against the loaded collection."""
        job_id = slug.decode(slug_or_id)
        for job in self.jobs:
            if job.id.lower() == job_id.lower():
                return job
        return None

    def job_url(self, job: JobRecord) -> str:
        return slug.job_url(job)


def load_jobs_file(path: str | Path) -> list[JobRecord]:
    """Read a job collection from a JSON file (a list, or ``{"jobs": [...]}``)."""
    with open(path, "r") as f:
        data = json.load(f)

    raw_jobs = data.get("jobs", []) if isinstance(data, dict) else data
    jobs = []
    for raw in raw_jobs:
        try:
            jobs.append(JobRecord.from_dict(raw))
        except ValueError as exc:
            logger.warning("Skipping job record in %s: %s", path, exc)
    logger.info("Loaded %d jobs from %s", len(jobs), path)
    return jobs
