"""Dashboard listing state: load, search, paginate, select."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from config import PAGE_SIZE

logger = logging.getLogger(__name__)

VIEW_MODES = ("card", "table")
LOAD_FAILED_MESSAGE = "Could not load responses. Please try again."


@dataclass(frozen=True)
class Page:
    items: list
    page: int
    page_size: int
    total: int
    total_pages: int


@dataclass(frozen=True)
class DashboardState:
    records: tuple = ()
    search: str = ""
    page: int = 1
    page_size: int = PAGE_SIZE
    view_mode: str = "card"
    selected: Optional[object] = None
    load_error: Optional[str] = None

    @property
    def filtered(self) -> list:
        return filter_responses(self.records, self.search)

    @property
    def current_page(self) -> Page:
        return paginate(self.filtered, self.page_size, self.page)


def load(state: DashboardState, store) -> DashboardState:
    """Replace the loaded records with a fresh read from the store."""
    result = store.list_all()
    if not result.ok:
        logger.error("Dashboard load failed: %s", result.error.message)
        return replace(state, records=(), selected=None, load_error=LOAD_FAILED_MESSAGE)
    return replace(state, records=tuple(result.data), load_error=None)


def filter_responses(records: Sequence, term: str) -> list:
    needle = (term or "").casefold()
    if not needle:
        return list(records)
    return [r for r in records if needle in r.name.casefold() or needle in r.email.casefold()]


def paginate(filtered: Sequence, page_size: int, page: int) -> Page:
    total = len(filtered)
    total_pages = math.ceil(total / page_size) if page_size > 0 else 0
    start = max(page - 1, 0) * page_size
    items = list(filtered[start:start + page_size])
    return Page(items=items, page=page, page_size=page_size, total=total, total_pages=total_pages)


def set_search(state: DashboardState, term: str) -> DashboardState:
    return replace(state, search=term or "", page=1)


def go_to_page(state: DashboardState, page: int) -> DashboardState:
    last = max(state.current_page.total_pages, 1)
    return replace(state, page=min(max(page, 1), last))


def set_view(state: DashboardState, mode: str) -> DashboardState:
    if mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {mode}")
    return replace(state, view_mode=mode)


def toggle_view(state: DashboardState) -> DashboardState:
    return set_view(state, "table" if state.view_mode == "card" else "card")


def select(state: DashboardState, record_id) -> DashboardState:
    """Open the detail overlay for one record of the filtered set.

    Unknown ids leave the selection cleared.
    """
    match = next((r for r in state.filtered if r.id == record_id), None)
    return replace(state, selected=match)


def close_detail(state: DashboardState) -> DashboardState:
    return replace(state, selected=None)
