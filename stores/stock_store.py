from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Protocol

from schemas.stock import SORT_KEYS, SortKey, Stock, StocksPage
from services.api_errors import ApiError

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


class StocksApi(Protocol):
    async def fetch_stocks(self, cursor: Optional[str] = "") -> StocksPage: ...


class StockStore:
    """
    Accumulating, cursor-paginated list of rating events.

    next_cursor is "" before the first page and None once the backend reports
    no further pages. Only one request is ever in flight: fetch_next() while
    loading, or after exhaustion, returns False without touching the network.
    """

    def __init__(self, api: StocksApi):
        self.api = api
        self.items: List[Stock] = []
        self.next_cursor: Optional[str] = ""
        self.loading: bool = False
        self.error: Optional[str] = None
        self.last_error: Optional[ApiError] = None
        self.search: str = ""
        self.sort_by: SortKey = "time_desc"

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None

    async def fetch_next(self) -> bool:
        if self.loading or self.next_cursor is None:
            return False
        self.loading = True
        try:
            page = await self.api.fetch_stocks(self.next_cursor or "")
            self.items.extend(page.items)
            self.next_cursor = page.next_page
            self.error = None
            self.last_error = None
            logger.info("stocks: +%d items (total %d, has_more=%s)", len(page.items), len(self.items), self.has_more)
        except ApiError as exc:
            self.error = str(exc)
            self.last_error = exc
        finally:
            self.loading = False
        return True

    def reset(self) -> None:
        self.items = []
        self.next_cursor = ""

    # -----------------------
    # View helpers
    # -----------------------

    def set_search(self, text: Optional[str]) -> None:
        self.search = (text or "").strip()

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in SORT_KEYS:
            raise ValueError(f"unknown sort key: {sort_by!r}")
        self.sort_by = sort_by  # type: ignore[assignment]

    def _matches(self, stock: Stock, needle: str) -> bool:
        return any(needle in (v or "").lower() for v in (stock.ticker, stock.company, stock.brokerage))

    def visible_items(self) -> List[Stock]:
        needle = self.search.lower()
        rows = [s for s in self.items if self._matches(s, needle)] if needle else list(self.items)
        return _sorted(rows, self.sort_by)

    def find_by_ticker(self, ticker: str) -> List[Stock]:
        """All rating events for one ticker, newest first."""
        sym = (ticker or "").strip().upper()
        return _sorted([s for s in self.items if s.ticker == sym], "time_desc")


def _sorted(rows: List[Stock], sort_by: SortKey) -> List[Stock]:
    # Missing values always sort last, whichever direction is requested.
    descending = sort_by.endswith("_desc")
    if sort_by.startswith("time"):
        present = [s for s in rows if s.timestamp is not None]
        missing = [s for s in rows if s.timestamp is None]
        key: Any = lambda s: s.timestamp or _OLDEST
    else:
        present = [s for s in rows if s.rating_to]
        missing = [s for s in rows if not s.rating_to]
        key = lambda s: (s.rating_to or "").lower()
    return sorted(present, key=key, reverse=descending) + missing
