# services/stocks_api.py
from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from config import settings
from schemas.recommendation import RecommendationResponse
from schemas.stock import StocksPage
from services.api_errors import (
    ApiError,
    ApiTimeoutError,
    HttpStatusError,
    MalformedResponseError,
    NetworkFailureError,
)
from utils.common_helpers import normalize_cursor, safe_json, safe_text

logger = logging.getLogger(__name__)


class StocksApiClient:
    """
    Async access layer for the ratings backend:
      GET {base}/stocks?next=<cursor>  -> {items: [...], next_page: str | null}
      GET {base}/recommendations       -> {generated_at, window_days, universe, recommendations: [...]}

    Every call is a single attempt bounded by `timeout` seconds in total.
    Failures raise an ApiError subclass; nothing is retried.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        base = settings.API_BASE_URL if base_url is None else base_url
        self.base_url = (base or "").rstrip("/")
        self.timeout = float(timeout if timeout is not None else settings.API_TIMEOUT_SEC)
        self._http = client

    @asynccontextmanager
    async def _client(self):
        if self._http is not None:
            yield self._http
            return
        async with httpx.AsyncClient(
            base_url=settings.API_ORIGIN,
            timeout=httpx.Timeout(self.timeout),
        ) as c:
            yield c

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = self._url(path)
        logger.debug("GET %s params=%s", url, params)

        async with self._client() as c:
            try:
                # wait_for cancels the request (and frees its connection) on expiry
                r = await asyncio.wait_for(c.get(url, params=params), timeout=self.timeout)
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                raise ApiTimeoutError(
                    f"Request timed out after {self.timeout:g}s: GET {url}", url=url
                ) from e
            except httpx.DecodingError as e:
                raise MalformedResponseError(
                    f"Malformed response from {url}: body could not be decoded", url=url
                ) from e
            except httpx.RequestError as e:
                # transport failures plus TooManyRedirects and friends
                raise NetworkFailureError(str(e) or type(e).__name__, url=url) from e

        if not r.is_success:
            raise HttpStatusError(r.status_code, safe_text(r), url=url)

        data = safe_json(r)
        if data is None:
            raise MalformedResponseError(f"Malformed response from {url}: expected a JSON object", url=url)
        return data

    def _log_failure(self, op: str, exc: ApiError) -> None:
        # message may carry response body text; keep it at DEBUG
        logger.warning(
            "%s failed (%s, status=%s)",
            op,
            exc.kind.value,
            exc.status_code,
            extra={"extra": {"kind": exc.kind.value, "status_code": exc.status_code}},
        )
        logger.debug("%s failure detail: %s", op, exc.message)

    # -----------------------
    # Stocks (paginated)
    # -----------------------

    async def fetch_stocks(self, cursor: Optional[str] = "") -> StocksPage:
        """
        Fetch one page of rating events. "" requests the first page.
        The returned next_page is None once the backend has no further pages.
        """
        try:
            data = await self._get_json("/stocks", params={"next": cursor or ""})
            items = data.get("items")
            if not isinstance(items, list):
                raise MalformedResponseError(
                    "Malformed response from /stocks: 'items' must be a list",
                    url=self._url("/stocks"),
                )
            try:
                page = StocksPage(items=items, next_page=normalize_cursor(data.get("next_page")))
            except ValidationError as e:
                raise MalformedResponseError(
                    f"Malformed response from /stocks: {e.error_count()} invalid item field(s)",
                    url=self._url("/stocks"),
                ) from e
        except ApiError as exc:
            self._log_failure("fetch_stocks", exc)
            raise

        logger.debug("fetch_stocks: %d items, has_more=%s", len(page.items), page.next_page is not None)
        return page

    # -----------------------
    # Recommendations (full set)
    # -----------------------

    async def fetch_recommendations(self) -> RecommendationResponse:
        try:
            data = await self._get_json("/recommendations")
            if not isinstance(data.get("recommendations"), list):
                raise MalformedResponseError(
                    "Malformed response from /recommendations: 'recommendations' must be a list",
                    url=self._url("/recommendations"),
                )
            try:
                resp = RecommendationResponse.model_validate(data)
            except ValidationError as e:
                raise MalformedResponseError(
                    f"Malformed response from /recommendations: {e.error_count()} invalid field(s)",
                    url=self._url("/recommendations"),
                ) from e
        except ApiError as exc:
            self._log_failure("fetch_recommendations", exc)
            raise

        logger.debug("fetch_recommendations: %d items", len(resp.recommendations))
        return resp


async def fetch_stocks(cursor: Optional[str] = "", *, client: Optional[httpx.AsyncClient] = None) -> StocksPage:
    return await StocksApiClient(client=client).fetch_stocks(cursor)


async def fetch_recommendations(*, client: Optional[httpx.AsyncClient] = None) -> RecommendationResponse:
    return await StocksApiClient(client=client).fetch_recommendations()
