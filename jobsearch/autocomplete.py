"""Debounced autocomplete for the keyword and location search boxes.

Each field runs a small state machine on the asyncio event loop::

    IDLE -> DEBOUNCING -> FETCHING -> DISPLAYING -> IDLE

Every keystroke of two or more characters (re)starts a 300ms timer; the
previous timer is cancelled first, so only the last keystroke fetches.
Fetches run the blocking backend call in the default executor. In-flight
requests are never cancelled. Instead each one is tagged with a
per-field request id and a response is dropped unless it belongs to the
newest request and still matches what is in the box.

On success the four suggestion groups are merged into one flat list
(jobs, companies, locations, skills) whose global index drives keyboard
navigation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from jobsearch.client import SUGGESTION_GROUPS, BackendClient
from jobsearch.config import AutocompleteConfig
from jobsearch.models import FilterCriteria
from jobsearch.slug import search_url

logger = logging.getLogger(__name__)

DEFAULT_CAPS: dict[str, Optional[int]] = {"jobs": 3, "companies": None, "locations": 3, "skills": 3}

MODES = ("normal", "navbar")

FetchFn = Callable[[str], Any]


class FieldState(Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    FETCHING = "fetching"
    DISPLAYING = "displaying"


@dataclass(frozen=True)
class Suggestion:
    """One row in the merged suggestion list."""

    group: str
    value: str
    index: int


def merge_suggestions(
    groups: Mapping[str, list[str]],
    caps: Mapping[str, Optional[int]] | None = None,
) -> list[Suggestion]:
    """Flatten suggestion groups in display order, applying per-group caps.

    A cap of ``None`` leaves that group uncapped.
    """
    caps = DEFAULT_CAPS if caps is None else caps
    merged: list[Suggestion] = []
    for group in SUGGESTION_GROUPS:
        values = list(groups.get(group) or [])
        cap = caps.get(group)
        if cap is not None:
            values = values[:cap]
        for value in values:
            merged.append(Suggestion(group=group, value=value, index=len(merged)))
    return merged


class SuggestionList:
    """A merged suggestion list with a keyboard cursor.

    ``active_index`` is -1 when nothing is highlighted.
    """

    def __init__(self, items: list[Suggestion] | None = None):
        self.items: list[Suggestion] = list(items or [])
        self.active_index = -1

    def __len__(self) -> int:
        return len(self.items)

    def move_down(self) -> int:
        """Highlight the next row, wrapping from the last row to the first."""
        if self.items:
            self.active_index = (self.active_index + 1) % len(self.items)
        return self.active_index

    def move_up(self) -> int:
        """Highlight the previous row, wrapping from the first row to the last."""
        if self.items:
            if self.active_index <= 0:
                self.active_index = len(self.items) - 1
            else:
                self.active_index -= 1
        return self.active_index

    def current(self) -> Suggestion | None:
        if 0 <= self.active_index < len(self.items):
            return self.items[self.active_index]
        return None

    def reset(self) -> None:
        self.active_index = -1


def _as_groups(result: Any) -> dict[str, list[str]]:
    """Location lookups return a bare list; everything else returns groups."""
    if isinstance(result, Mapping):
        return {group: list(result.get(group) or []) for group in SUGGESTION_GROUPS}
    if isinstance(result, list):
        return {"locations": [str(v) for v in result]}
    return {}


class AutocompleteField:
    """Autocomplete state for one search box.

    Args:
        name: Which criterion the box edits, ``"keyword"`` or ``"location"``
        fetch: Blocking callable returning suggestion groups for a query
            (or a plain list of locations)
        criteria: Filter state the box writes selections into
        mode: ``"navbar"`` navigates on selection, ``"normal"`` only
            updates ``criteria``
        on_navigate: Called with the search URL in navbar mode
        on_change: Called with ``criteria`` after a selection in normal mode
    """

    def __init__(
        self,
        name: str,
        fetch: FetchFn,
        criteria: FilterCriteria | None = None,
        mode: str = "normal",
        on_navigate: Callable[[str], None] | None = None,
        on_change: Callable[[FilterCriteria], None] | None = None,
        config: AutocompleteConfig | None = None,
    ):
        if name not in ("keyword", "location"):
            raise ValueError(f"Unknown autocomplete field {name!r}")
        if mode not in MODES:
            raise ValueError(f"Unknown autocomplete mode {mode!r}; expected one of {MODES}")

        config = config or AutocompleteConfig()
        self.name = name
        self.mode = mode
        self.criteria = criteria if criteria is not None else FilterCriteria()
        self.on_navigate = on_navigate
        self.on_change = on_change
        self.debounce_seconds = config.debounce_seconds
        self.min_chars = config.min_chars
        self.caps = dict(config.caps)

        self._fetch_fn = fetch
        self._timer: asyncio.TimerHandle | None = None
        self._request_id = 0

        self.value = ""
        self.state = FieldState.IDLE
        self.suggestions = SuggestionList()
        self.fetch_task: asyncio.Task | None = None

    @classmethod
    def for_keyword(cls, client: BackendClient, **kwargs: Any) -> AutocompleteField:
        kwargs.setdefault("config", client.config.autocomplete)
        return cls("keyword", client.autocomplete, **kwargs)

    @classmethod
    def for_location(cls, client: BackendClient, **kwargs: Any) -> AutocompleteField:
        kwargs.setdefault("config", client.config.autocomplete)
        return cls("location", client.autocomplete_locations, **kwargs)

    @property
    def is_open(self) -> bool:
        return self.state is FieldState.DISPLAYING

    @property
    def active_index(self) -> int:
        return self.suggestions.active_index

    # ------------------------------------------------------------------
    # Input events
    # ------------------------------------------------------------------

    def on_input(self, text: str) -> None:
        """Handle a keystroke. Must be called from a running event loop."""
        self.value = text
        self._cancel_timer()

        query = text.strip()
        if len(query) < self.min_chars:
            # Anything still in flight is now stale.
            self._request_id += 1
            self.suggestions = SuggestionList()
            self.state = FieldState.IDLE
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._fire, query)
        self.state = FieldState.DEBOUNCING

    def handle_key(self, key: str) -> Suggestion | None:
        """ArrowUp/ArrowDown move the cursor, Enter selects, Escape closes.

        Returns the selected suggestion on Enter, otherwise None.
        """
        if key == "Escape":
            self.close()
            return None
        if not self.is_open:
            return None

        if key == "ArrowDown":
            self.suggestions.move_down()
        elif key == "ArrowUp":
            self.suggestions.move_up()
        elif key == "Enter":
            item = self.suggestions.current()
            if item is not None:
                self.select(item)
            return item
        return None

    def blur(self) -> None:
        """Focus moved outside the field and its dropdown."""
        self.close()

    def close(self) -> None:
        """Close the dropdown; a pending timer or fetch will not reopen it."""
        self._cancel_timer()
        self._request_id += 1
        self.suggestions.reset()
        self.state = FieldState.IDLE

    def select(self, item: Suggestion) -> None:
        """Write ``item`` into the box, then navigate or update criteria."""
        self._cancel_timer()
        self._request_id += 1
        self.value = item.value
        self.suggestions.reset()
        self.state = FieldState.IDLE

        if self.mode == "navbar":
            keyword = item.value if self.name == "keyword" else self.criteria.keyword
            location = item.value if self.name == "location" else self.criteria.location
            url = search_url(keyword, location)
            logger.debug("Navigating to %s", url)
            if self.on_navigate:
                self.on_navigate(url)
            return

        setattr(self.criteria, self.name, item.value)
        if self.on_change:
            self.on_change(self.criteria)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def receive(self, request_id: int, query: str, result: Any) -> bool:
        """Apply a fetch result if it is still current.

        Returns False (and changes nothing) for stale responses.
        """
        if request_id != self._request_id or query != self.value.strip():
            logger.debug(
                "Discarding stale %s suggestions for %r (request %d, latest %d)",
                self.name, query, request_id, self._request_id,
            )
            return False

        self.suggestions = SuggestionList(merge_suggestions(_as_groups(result), self.caps))
        self.state = FieldState.DISPLAYING
        return True

    def _fire(self, query: str) -> None:
        self._timer = None
        self._request_id += 1
        self.state = FieldState.FETCHING
        loop = asyncio.get_running_loop()
        self.fetch_task = loop.create_task(self._fetch(self._request_id, query))

    async def _fetch(self, request_id: int, query: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            result = await loop.run_in_executor(None, self._fetch_fn, query)
        except Exception:
            logger.exception("Autocomplete fetch for %r failed", query)
            if request_id == self._request_id:
                self.suggestions = SuggestionList()
                self.state = FieldState.IDLE
            return
        self.receive(request_id, query, result)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
