"""Configuration loader for the job search engine.

Reads config.yaml and returns typed configuration objects that the
search session, backend client and autocomplete fields consume.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"
DEFAULT_API_BASE_URL = "https://mcb.instatripplan.com/api"
API_URL_ENV_VAR = "JOBSEARCH_API_URL"


def _default_caps() -> dict[str, int | None]:
    return {"jobs": 3, "companies": None, "locations": 3, "skills": 3}


@dataclass
class AutocompleteConfig:
    """Debounce and display settings shared by every autocomplete field."""

    debounce_ms: int = 300
    min_chars: int = 2
    request_limit: int = 5
    caps: dict[str, int | None] = field(default_factory=_default_caps)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


@dataclass
class StorageConfig:
    """Where saved searches and search history live on disk."""

    path: str = "data/search_state.json"
    saved_searches_cap: int = 10
    search_history_cap: int = 5


@dataclass
class SearchConfig:
    """Top-level configuration."""

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout_seconds: float = 30.0
    user_agent: str = "jobsearch/0.1 (+https://mcb.instatripplan.com)"
    log_level: str = "INFO"
    fetch_limit: int = 500
    page_size: int = 12
    default_sort: str = "newest"
    autocomplete: AutocompleteConfig = field(default_factory=AutocompleteConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)


def normalize_api_base_url(url: str) -> str:
    """Strip trailing slashes and make sure the URL ends with ``/api``."""
    url = (url or "").strip().rstrip("/")
    if not url:
        url = DEFAULT_API_BASE_URL
    return url if url.endswith("/api") else f"{url}/api"


def _parse_autocomplete(raw: dict[str, Any]) -> AutocompleteConfig:
    caps = _default_caps()
    caps.update(raw.get("caps") or {})
    return AutocompleteConfig(
        debounce_ms=raw.get("debounce_ms", 300),
        min_chars=raw.get("min_chars", 2),
        request_limit=raw.get("request_limit", 5),
        caps=caps,
    )


def _parse_storage(raw: dict[str, Any]) -> StorageConfig:
    return StorageConfig(
        path=raw.get("path", "data/search_state.json"),
        saved_searches_cap=raw.get("saved_searches_cap", 10),
        search_history_cap=raw.get("search_history_cap", 5),
    )


def load_config(path: Path | str | None = None) -> SearchConfig:
    """Load the search configuration from a YAML file.

    The ``JOBSEARCH_API_URL`` environment variable, when set, wins over the
    file's ``api_base_url``.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH

    raw: dict[str, Any] = {}
    if not config_path.exists():
        logger.warning("Config file not found at %s, using defaults", config_path)
    else:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f) or {}

    api_base_url = os.environ.get(API_URL_ENV_VAR) or raw.get(
        "api_base_url", DEFAULT_API_BASE_URL
    )

    return SearchConfig(
        api_base_url=normalize_api_base_url(api_base_url),
        request_timeout_seconds=raw.get("request_timeout_seconds", 30.0),
        user_agent=raw.get("user_agent", SearchConfig.user_agent),
        log_level=raw.get("log_level", "INFO"),
        fetch_limit=raw.get("fetch_limit", 500),
        page_size=raw.get("page_size", 12),
        default_sort=raw.get("default_sort", "newest"),
        autocomplete=_parse_autocomplete(raw.get("autocomplete") or {}),
        storage=_parse_storage(raw.get("storage") or {}),
    )
