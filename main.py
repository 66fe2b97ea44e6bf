# main.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from config import settings
from config.logging_config import configure_logging
from services.api_errors import ApiError
from services.stocks_api import StocksApiClient
from stores.recommendation_store import RecommendationStore
from stores.stock_store import StockStore

logger = logging.getLogger("ratings_client")


@dataclass
class AppState:
    """Everything the application owns; built once here and passed explicitly."""

    http: httpx.AsyncClient
    api: StocksApiClient
    stocks: StockStore
    recommendations: RecommendationStore
    owns_http: bool = True


def build_app_state(client: Optional[httpx.AsyncClient] = None) -> AppState:
    owns_http = client is None
    http = client or httpx.AsyncClient(
        base_url=settings.API_ORIGIN,
        timeout=httpx.Timeout(settings.API_TIMEOUT_SEC),
    )
    api = StocksApiClient(client=http)
    return AppState(
        http=http,
        api=api,
        stocks=StockStore(api),
        recommendations=RecommendationStore(api),
        owns_http=owns_http,
    )


async def close_app_state(state: AppState) -> None:
    if state.owns_http:
        await state.http.aclose()


def _log_unavailable(what: str, exc: Optional[ApiError], message: str) -> None:
    # Error text can embed the response body; only kind/status go above DEBUG.
    kind = exc.kind.value if exc is not None else "unknown"
    status = exc.status_code if exc is not None else None
    logger.error("%s unavailable (%s, status=%s)", what, kind, status)
    logger.debug("%s error detail: %s", what, message)


async def run(state: AppState) -> None:
    # The stores are independent; load both first views together.
    await asyncio.gather(state.stocks.fetch_next(), state.recommendations.fetch())

    if state.stocks.error:
        _log_unavailable("stocks", state.stocks.last_error, state.stocks.error)
    else:
        logger.info(
            "stocks: %d loaded, more pages: %s",
            len(state.stocks.items),
            "yes" if state.stocks.has_more else "no",
        )

    recs = state.recommendations
    if recs.error:
        _log_unavailable("recommendations", recs.last_error, recs.error)
    else:
        logger.info(
            "recommendations: %d (generated %s, window %sd, universe %s)",
            len(recs.items),
            recs.generated_at or "n/a",
            recs.window_days,
            recs.universe,
        )
        for r in recs.top(5):
            logger.info("  %-6s %-4s %.2f %s", r.ticker, r.decision, r.score, r.company)


async def _amain() -> None:
    state = build_app_state()
    try:
        await run(state)
    finally:
        await close_app_state(state)


def main() -> None:
    configure_logging()
    try:
        asyncio.run(_amain())
    except KeyboardInterrupt:
        logger.info("interrupted")


if __name__ == "__main__":
    main()
