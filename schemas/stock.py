from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.common_helpers import parse_target_price

SortKey = Literal["time_desc", "time_asc", "rating_to_desc", "rating_to_asc"]
SORT_KEYS: tuple = get_args(SortKey)


class Stock(BaseModel):
    """One analyst rating event as returned by GET /stocks."""

    model_config = ConfigDict(extra="ignore")

    ticker: str
    company: str = ""
    brokerage: str = ""
    action: str = ""
    rating_from: Optional[str] = None
    rating_to: Optional[str] = None
    target_from: Optional[float] = None
    target_to: Optional[float] = None
    time: str = ""

    @field_validator("ticker", mode="before")
    @classmethod
    def _normalize_ticker(cls, v: Any) -> str:
        sym = "" if v is None else str(v).strip().upper()
        if not sym:
            raise ValueError("ticker must be non-empty")
        return sym

    @field_validator("company", "brokerage", "action", "time", mode="before")
    @classmethod
    def _text(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("rating_from", "rating_to", mode="before")
    @classmethod
    def _rating(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        s = str(v).strip()
        return s or None

    @field_validator("target_from", "target_to", mode="before")
    @classmethod
    def _target(cls, v: Any) -> Optional[float]:
        return parse_target_price(v)

    @property
    def timestamp(self) -> Optional[datetime]:
        """Parsed `time`, always timezone-aware; None when unparseable."""
        raw = (self.time or "").strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(raw)
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt


class StocksPage(BaseModel):
    items: List[Stock] = Field(default_factory=list)
    # Already normalized: None means the list is exhausted.
    next_page: Optional[str] = None
