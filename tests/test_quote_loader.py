import unittest

from quote_dashboard.errors import AggregateError
from quote_dashboard.schemas.quote import Quote
from quote_dashboard.services.dashboard_state import DashboardStore
from quote_dashboard.services.quote_loader import QuoteLoader


class StubFetcher:
    def __init__(self, *, quotes=None, error: Exception | None = None) -> None:
        self.quotes = quotes or []
        self.error = error
        self.calls = 0

    def fetch_all(self, symbols):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [Quote(symbol=s, price=1.0, change_pct=0.1) for s in symbols]


class QuoteLoaderTest(unittest.TestCase):
    def _loader(self, fetcher, store=None):
        return QuoteLoader(
            store=store or DashboardStore(),
            fetcher_factory=lambda: fetcher,
            symbols=("AAPL", "MSFT", "GOOGL"),
        )

    def test_successful_cycle_marks_ready(self):
        fetcher = StubFetcher()
        loader = self._loader(fetcher)

        self.assertTrue(loader.start())
        loader.join(timeout=2)

        state = loader.store.snapshot()
        self.assertEqual(state.status, "READY")
        self.assertEqual([q.symbol for q in state.quotes], ["AAPL", "MSFT", "GOOGL"])

    def test_loader_runs_at_most_once(self):
        fetcher = StubFetcher()
        loader = self._loader(fetcher)

        self.assertTrue(loader.start())
        self.assertFalse(loader.start())
        loader.join(timeout=2)

        self.assertEqual(fetcher.calls, 1)
        self.assertTrue(loader.started)

    def test_aggregate_error_marks_failed(self):
        error = AggregateError([("GOOGL", RuntimeError("429"))])
        loader = self._loader(StubFetcher(error=error))

        loader.start()
        loader.join(timeout=2)

        state = loader.store.snapshot()
        self.assertEqual(state.status, "FAILED")
        self.assertEqual(state.error, "Failed to fetch GOOGL")
        self.assertEqual(state.quotes, [])

    def test_fetcher_construction_error_marks_failed(self):
        def broken_factory():
            raise ValueError("FINNHUB_API_KEY is not configured")

        loader = QuoteLoader(store=DashboardStore(), fetcher_factory=broken_factory, symbols=("AAPL",))

        loader.start()
        loader.join(timeout=2)

        state = loader.store.snapshot()
        self.assertEqual(state.status, "FAILED")
        self.assertEqual(state.error, "FINNHUB_API_KEY is not configured")


if __name__ == "__main__":
    unittest.main()
