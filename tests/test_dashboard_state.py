import unittest

from quote_dashboard.errors import InvalidStateTransitionError
from quote_dashboard.schemas.quote import Quote
from quote_dashboard.services.dashboard_state import (
    DashboardStore,
    LoadTimeline,
    initial_state,
    mark_failed,
    mark_ready,
    visible_quotes,
    with_query,
)

QUOTES = [
    Quote(symbol="AAPL", price=150.25, change_pct=1.2),
    Quote(symbol="MSFT", price=310.10, change_pct=-0.5),
    Quote(symbol="GOOGL", price=2800.0, change_pct=0.0),
]


class DashboardTransitionsTest(unittest.TestCase):
    def test_initial_state_is_loading(self):
        state = initial_state()

        self.assertEqual(state.status, "LOADING")
        self.assertEqual(state.quotes, [])
        self.assertIsNone(state.error)
        self.assertEqual(state.query, "")

    def test_loading_to_ready(self):
        state = mark_ready(initial_state(), QUOTES)

        self.assertEqual(state.status, "READY")
        self.assertEqual([q.symbol for q in state.quotes], ["AAPL", "MSFT", "GOOGL"])

    def test_loading_to_failed_with_fallback_message(self):
        self.assertEqual(mark_failed(initial_state(), "Failed to fetch GOOGL").error, "Failed to fetch GOOGL")
        self.assertEqual(mark_failed(initial_state(), "").error, "Failed to load stock data.")
        self.assertEqual(mark_failed(initial_state(), None).error, "Failed to load stock data.")

    def test_terminal_states_reject_transitions(self):
        ready = mark_ready(initial_state(), QUOTES)
        failed = mark_failed(initial_state(), "boom")

        with self.assertRaises(InvalidStateTransitionError):
            mark_ready(ready, QUOTES)
        with self.assertRaises(InvalidStateTransitionError):
            mark_failed(ready, "boom")
        with self.assertRaises(InvalidStateTransitionError):
            mark_ready(failed, QUOTES)

    def test_transitions_do_not_mutate_input(self):
        state = initial_state()
        mark_ready(state, QUOTES)
        with_query(state, "ms")

        self.assertEqual(state.status, "LOADING")
        self.assertEqual(state.query, "")

    def test_visible_quotes_applies_query(self):
        state = with_query(mark_ready(initial_state(), QUOTES), "go")
        self.assertEqual([q.symbol for q in visible_quotes(state)], ["GOOGL"])


class DashboardStoreTest(unittest.TestCase):
    def test_subscribers_receive_new_state(self):
        store = DashboardStore()
        seen = []
        store.subscribe(seen.append)

        store.apply(mark_ready, QUOTES)

        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0].status, "READY")
        self.assertEqual(store.snapshot().status, "READY")

    def test_unsubscribe_stops_notifications(self):
        store = DashboardStore()
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()

        store.apply(with_query, "aa")

        self.assertEqual(seen, [])
        self.assertEqual(store.snapshot().query, "aa")

    def test_invalid_transition_keeps_previous_state(self):
        store = DashboardStore()
        store.apply(mark_failed, "Failed to fetch AAPL")

        with self.assertRaises(InvalidStateTransitionError):
            store.apply(mark_ready, QUOTES)
        self.assertEqual(store.snapshot().status, "FAILED")
        self.assertEqual(store.snapshot().quotes, [])

    def test_snapshot_is_a_copy(self):
        store = DashboardStore()
        store.apply(mark_ready, QUOTES)

        snapshot = store.snapshot()
        snapshot.quotes.clear()

        self.assertEqual(len(store.snapshot().quotes), 3)



class LoadTimelineTest(unittest.TestCase):
    def test_records_first_resolution_only(self):
        ticks = iter([100.0, 102.5, 110.0])
        timeline = LoadTimeline(clock=lambda: next(ticks))
        store = DashboardStore()
        store.subscribe(timeline.on_state_change)

        self.assertEqual(timeline.metrics(), {"resolved_status": None, "load_elapsed_sec": None})

        store.apply(mark_ready, QUOTES)
        store.apply(with_query, "ms")

        self.assertEqual(timeline.metrics(), {"resolved_status": "READY", "load_elapsed_sec": 2.5})

    def test_records_failure(self):
        ticks = iter([5.0, 6.0])
        timeline = LoadTimeline(clock=lambda: next(ticks))
        store = DashboardStore()
        store.subscribe(timeline.on_state_change)

        store.apply(mark_failed, "Failed to fetch AAPL")

        self.assertEqual(timeline.resolved_status, "FAILED")
        self.assertEqual(timeline.load_elapsed_sec, 1.0)


if __name__ == "__main__":
    unittest.main()
