from __future__ import annotations

import logging
import threading
from typing import Callable, Sequence

from quote_dashboard.errors import AggregateError, ConfigurationError
from quote_dashboard.services.dashboard_state import DashboardStore, mark_failed, mark_ready
from quote_dashboard.services.quote_fetcher import QuoteFetcher

logger = logging.getLogger(__name__)


class QuoteLoader:
    """Runs the single startup fetch cycle on a worker thread and publishes the result."""

    def __init__(
        self,
        *,
        store: DashboardStore,
        fetcher_factory: Callable[[], QuoteFetcher],
        symbols: Sequence[str],
    ) -> None:
        self.store = store
        self.fetcher_factory = fetcher_factory
        self.symbols = tuple(symbols)
        self._lock = threading.Lock()
        self._thread: threading.Thread | None = None

    @property
    def started(self) -> bool:
        return self._thread is not None

    def start(self) -> bool:
        with self._lock:
            if self._thread is not None:
                return False
            self._thread = threading.Thread(target=self.run, daemon=True, name="quote-loader")
        logger.info("[DASHBOARD][loader_start] symbols=%s", ",".join(self.symbols))
        self._thread.start()
        return True

    def run(self) -> None:
        try:
            quotes = self.fetcher_factory().fetch_all(self.symbols)
        except AggregateError as exc:
            self.store.apply(mark_failed, str(exc))
            return
        except ConfigurationError as exc:
            logger.error("[DASHBOARD][config_error] error=%s", exc)
            self.store.apply(mark_failed, str(exc))
            return
        except Exception as exc:
            logger.exception("[DASHBOARD][loader_error] error=%s", exc)
            self.store.apply(mark_failed, str(exc))
            return
        self.store.apply(mark_ready, quotes)

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout=timeout)
