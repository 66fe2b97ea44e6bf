import asyncio
import unittest

from schemas.recommendation import Recommendation, RecommendationResponse
from services.api_errors import HttpStatusError, MalformedResponseError
from stores.recommendation_store import RecommendationStore


def _rec(ticker: str, score: float, decision: str) -> Recommendation:
    return Recommendation(ticker=ticker, score=score, decision=decision, company=f"{ticker} Corp")


def _response(*recs, generated_at="2025-01-10T12:00:00Z", window_days=14, universe=80):
    return RecommendationResponse(
        generated_at=generated_at,
        window_days=window_days,
        universe=universe,
        recommendations=list(recs),
    )


class _FakeRecommendationsApi:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    async def fetch_recommendations(self):
        self.calls += 1
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


class _BlockingRecommendationsApi:
    def __init__(self, response):
        self.response = response
        self.release = asyncio.Event()
        self.calls = 0

    async def fetch_recommendations(self):
        self.calls += 1
        await self.release.wait()
        return self.response


class RecommendationStoreTests(unittest.TestCase):
    def test_initial_state(self):
        store = RecommendationStore(_FakeRecommendationsApi())
        self.assertEqual(store.items, [])
        self.assertIsNone(store.generated_at)
        self.assertEqual(store.window_days, 30)
        self.assertIsNone(store.universe)
        self.assertFalse(store.loading)
        self.assertIsNone(store.error)

    def test_fetch_replaces_list_and_metadata(self):
        api = _FakeRecommendationsApi(
            _response(_rec("AAPL", 2.0, "BUY"), _rec("MSFT", 0.1, "HOLD")),
            _response(_rec("TSLA", -1.5, "SELL"), generated_at="2025-01-11T12:00:00Z", window_days=30, universe=81),
        )
        store = RecommendationStore(api)

        asyncio.run(store.fetch())
        self.assertEqual([r.ticker for r in store.items], ["AAPL", "MSFT"])
        self.assertEqual(store.window_days, 14)

        asyncio.run(store.fetch())
        self.assertEqual([r.ticker for r in store.items], ["TSLA"])
        self.assertEqual(store.generated_at, "2025-01-11T12:00:00Z")
        self.assertEqual(store.window_days, 30)
        self.assertEqual(store.universe, 81)
        self.assertEqual(api.calls, 2)

    def test_failure_keeps_previous_list_and_metadata(self):
        api = _FakeRecommendationsApi(
            _response(_rec("AAPL", 2.0, "BUY")),
            MalformedResponseError("Malformed response from /recommendations"),
        )
        store = RecommendationStore(api)

        async def run():
            await store.fetch()
            await store.fetch()

        asyncio.run(run())
        self.assertEqual([r.ticker for r in store.items], ["AAPL"])
        self.assertEqual(store.generated_at, "2025-01-10T12:00:00Z")
        self.assertEqual(store.universe, 80)
        self.assertFalse(store.loading)
        self.assertIn("Malformed", store.error)
        self.assertIsInstance(store.last_error, MalformedResponseError)

    def test_call_while_loading_is_dropped(self):
        api = _BlockingRecommendationsApi(_response(_rec("AAPL", 2.0, "BUY")))
        store = RecommendationStore(api)

        async def run():
            task = asyncio.create_task(store.fetch())
            await asyncio.sleep(0)
            dropped = await store.fetch()
            api.release.set()
            return dropped, await task

        dropped, dispatched = asyncio.run(run())
        self.assertFalse(dropped)
        self.assertTrue(dispatched)
        self.assertEqual(api.calls, 1)

    def test_clear_empties_list_and_error_only(self):
        api = _FakeRecommendationsApi(
            _response(_rec("AAPL", 2.0, "BUY")),
            HttpStatusError(503, "maintenance"),
        )
        store = RecommendationStore(api)

        async def run():
            await store.fetch()
            await store.fetch()

        asyncio.run(run())
        self.assertIsNotNone(store.error)

        store.loading = True
        store.clear()
        self.assertEqual(store.items, [])
        self.assertIsNone(store.error)
        self.assertIsNone(store.last_error)
        self.assertTrue(store.loading)
        self.assertEqual(store.universe, 80)

    def test_by_decision_and_top(self):
        store = RecommendationStore(_FakeRecommendationsApi())
        store.items = [
            _rec("AAPL", 2.0, "BUY"),
            _rec("MSFT", 0.1, "HOLD"),
            _rec("NVDA", 3.5, "BUY"),
            _rec("TSLA", -1.5, "SELL"),
        ]
        self.assertEqual([r.ticker for r in store.by_decision("buy")], ["AAPL", "NVDA"])
        self.assertEqual([r.ticker for r in store.top(2)], ["NVDA", "AAPL"])
        self.assertEqual(store.top(0), [])

    def test_decision_kept_as_received_and_matched_case_insensitively(self):
        store = RecommendationStore(_FakeRecommendationsApi())
        store.items = [_rec("AAPL", 2.0, "buy"), _rec("MSFT", 0.1, "Hold"), _rec("NVDA", 3.5, " BUY ")]
        self.assertEqual([r.decision for r in store.items], ["buy", "Hold", " BUY "])
        self.assertEqual([r.ticker for r in store.by_decision("BUY")], ["AAPL", "NVDA"])
        self.assertEqual([r.ticker for r in store.by_decision("hold")], ["MSFT"])


if __name__ == "__main__":
    unittest.main()
