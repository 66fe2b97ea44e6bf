from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from config.settings import DEFAULT_WINDOW_DAYS
from schemas.recommendation import Recommendation, RecommendationResponse
from services.api_errors import ApiError

logger = logging.getLogger(__name__)


class RecommendationsApi(Protocol):
    async def fetch_recommendations(self) -> RecommendationResponse: ...


class RecommendationStore:
    """Replace-on-fetch list of buy/hold/sell recommendations plus response metadata."""

    def __init__(self, api: RecommendationsApi):
        self.api = api
        self.items: List[Recommendation] = []
        self.generated_at: Optional[str] = None
        self.window_days: Optional[int] = DEFAULT_WINDOW_DAYS
        self.universe: Optional[int] = None
        self.loading: bool = False
        self.error: Optional[str] = None
        self.last_error: Optional[ApiError] = None

    async def fetch(self) -> bool:
        if self.loading:
            return False
        self.loading = True
        try:
            data = await self.api.fetch_recommendations()
            self.items = list(data.recommendations)
            self.generated_at = data.generated_at
            self.window_days = data.window_days
            self.universe = data.universe
            self.error = None
            self.last_error = None
            logger.info("recommendations: %d items (universe=%s)", len(self.items), self.universe)
        except ApiError as exc:
            self.error = str(exc)
            self.last_error = exc
        finally:
            self.loading = False
        return True

    def clear(self) -> None:
        self.items = []
        self.error = None
        self.last_error = None

    def by_decision(self, decision: str) -> List[Recommendation]:
        want = (decision or "").strip().upper()
        return [r for r in self.items if r.decision.strip().upper() == want]

    def top(self, n: int = 10) -> List[Recommendation]:
        return sorted(self.items, key=lambda r: r.score, reverse=True)[: max(0, int(n))]
