"""Client-side persistence for saved searches and recent search history.

Two lists are kept under fixed keys, newest first:

1. **savedSearches**: searches the user explicitly saved, capped at 10
2. **searchHistory**: searches recently run, capped at 5

Both are de-duplicated by the ``(keyword, location, jobType)`` triple;
re-saving an existing triple moves it to the front with a fresh id and
timestamp.

The backing store is injected. ``InMemoryStore`` is for tests and
short-lived sessions. ``JsonFileStore`` keeps everything in a single JSON
file using the temp-file + fsync + rename pattern, with a ``.bak`` copy of
the previous state that is used if the primary file is corrupted.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any, Protocol

from jobsearch.models import FilterCriteria, SavedSearch

logger = logging.getLogger(__name__)

SAVED_SEARCHES_KEY = "savedSearches"
SEARCH_HISTORY_KEY = "searchHistory"


class KeyValueStore(Protocol):
    """The subset of a local-storage API the search engine needs."""

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class InMemoryStore:
    """Dict-backed store."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Any:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonFileStore:
    """All keys in one JSON object on disk, next to a ``.bak`` of the previous state."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.backup_path = self.path.with_suffix(self.path.suffix + ".bak")

    def get(self, key: str) -> Any:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            try:
                shutil.copy2(self.path, self.backup_path)
            except OSError as exc:
                logger.warning("Could not back up %s: %s", self.path, exc)
        self._write(data)

    def _read(self) -> dict[str, Any]:
        """The stored object; falls back to the backup, then to empty."""
        if not self.path.exists():
            return {}
        try:
            return self._as_object(self._load(self.path), self.path)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Unreadable state file %s (%s), trying backup", self.path, exc)

        if not self.backup_path.exists():
            logger.error("No backup for %s, starting from an empty store", self.path)
            return {}
        try:
            data = self._as_object(self._load(self.backup_path), self.backup_path)
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Backup %s is unreadable too (%s), starting empty", self.backup_path, exc)
            return {}
        logger.info("Recovered %s from %s", self.path, self.backup_path)
        self._write(data)
        return data

    @staticmethod
    def _load(path: Path) -> Any:
        with open(path, "r") as f:
            return json.load(f)

    @staticmethod
    def _as_object(data: Any, path: Path) -> dict[str, Any]:
        if not isinstance(data, dict):
            logger.warning("%s does not hold a JSON object, ignoring it", path)
            return {}
        return data

    def _write(self, data: dict[str, Any]) -> None:
        """Replace the state file atomically (temp file, fsync, rename)."""
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            tmp_path.replace(self.path)
        except OSError:
            logger.error("Could not write %s", self.path)
            tmp_path.unlink(missing_ok=True)
            raise


class SearchHistory:
    """Saved searches and recent history on top of a ``KeyValueStore``."""

    def __init__(
        self,
        store: KeyValueStore,
        saved_cap: int = 10,
        history_cap: int = 5,
    ):
        self.store = store
        self.saved_cap = saved_cap
        self.history_cap = history_cap

    # ── Saved searches ──────────────────────────────────────────────────

    def saved_searches(self) -> list[SavedSearch]:
        return self._load(SAVED_SEARCHES_KEY)

    def save_search(self, criteria: FilterCriteria) -> SavedSearch:
        """Snapshot ``criteria`` into the saved list.

        Raises ValueError when there is no keyword, location or job type to
        save.
        """
        if not (criteria.keyword or criteria.location or criteria.job_type):
            raise ValueError("Add at least a keyword, location, or job type before saving a search")
        entry = SavedSearch.from_criteria(criteria)
        self._push(SAVED_SEARCHES_KEY, entry, self.saved_cap)
        logger.info("Saved search %s (keyword=%r, location=%r)", entry.id, entry.keyword, entry.location)
        return entry

    def remove_saved_search(self, search_id: str) -> bool:
        entries = self.saved_searches()
        kept = [e for e in entries if e.id != search_id]
        if len(kept) == len(entries):
            return False
        self._store(SAVED_SEARCHES_KEY, kept)
        return True

    # ── Recent history ──────────────────────────────────────────────────

    def recent_searches(self) -> list[SavedSearch]:
        return self._load(SEARCH_HISTORY_KEY)

    def record(self, criteria: FilterCriteria) -> SavedSearch | None:
        """Add a run search to history; searches with neither keyword nor
        location are not recorded."""
        if not (criteria.keyword or criteria.location):
            return None
        entry = SavedSearch.from_criteria(criteria)
        self._push(SEARCH_HISTORY_KEY, entry, self.history_cap)
        return entry

    # ── Internal helpers ────────────────────────────────────────────────

    def _load(self, key: str) -> list[SavedSearch]:
        raw = self.store.get(key)
        if not isinstance(raw, list):
            if raw is not None:
                logger.warning("Ignoring malformed %s entry in store", key)
            return []
        return [SavedSearch.from_dict(item) for item in raw if isinstance(item, dict)]

    def _push(self, key: str, entry: SavedSearch, cap: int) -> None:
        existing = [e for e in self._load(key) if e.dedup_key != entry.dedup_key]
        self._store(key, [entry, *existing][:cap])

    def _store(self, key: str, entries: list[SavedSearch]) -> None:
        try:
            self.store.set(key, [e.to_dict() for e in entries])
        except OSError as exc:
            logger.warning("Failed to persist %s: %s", key, exc)
