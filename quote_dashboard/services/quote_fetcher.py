from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Sequence

from quote_dashboard.errors import AggregateError
from quote_dashboard.schemas.quote import Quote

logger = logging.getLogger(__name__)


class QuoteFetcher:
    """Fan-out/fan-in over the upstream client with all-or-nothing join."""

    def __init__(self, *, rest_client, max_workers: int = 8) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.rest_client = rest_client
        self.max_workers = max_workers

        self.batches = 0
        self.last_batch_target = 0
        self.last_batch_ok = 0
        self.last_batch_failed = 0
        self.last_failed_symbols: list[str] = []
        self.last_elapsed_sec = 0.0

    @staticmethod
    def _validate_symbols(symbols: Sequence[str]) -> list[str]:
        requested = [str(s).strip().upper() for s in symbols]
        if not requested:
            raise ValueError("symbols must not be empty")
        if len(set(requested)) != len(requested):
            raise ValueError("symbols must be distinct")
        return requested

    def _retrieve(self, symbol: str) -> Quote:
        payload = self.rest_client.get_quote(symbol)
        if not isinstance(payload, dict):
            raise ValueError(f"malformed quote payload for {symbol}")
        return Quote(
            symbol=symbol,
            price=payload.get("price"),
            change_pct=payload.get("change_pct"),
        )

    def fetch_all(self, symbols: Sequence[str]) -> list[Quote]:
        requested = self._validate_symbols(symbols)
        started = time.monotonic()

        workers = min(len(requested), self.max_workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="quote-fetch") as executor:
            futures = [executor.submit(self._retrieve, symbol) for symbol in requested]
            wait(futures)

        results: list[Quote] = []
        failures: list[tuple[str, BaseException]] = []
        for symbol, future in zip(requested, futures):
            exc = future.exception()
            if exc is not None:
                logger.warning("[QUOTE][fetch_error] symbol=%s error=%s", symbol, exc)
                failures.append((symbol, exc))
                continue
            results.append(future.result())

        self.batches += 1
        self.last_batch_target = len(requested)
        self.last_batch_ok = len(results)
        self.last_batch_failed = len(failures)
        self.last_failed_symbols = [symbol for symbol, _ in failures]
        self.last_elapsed_sec = time.monotonic() - started

        logger.info(
            "[QUOTE][batch_resolve] target_count=%s ok_count=%s failed_count=%s elapsed=%.3fs",
            self.last_batch_target,
            self.last_batch_ok,
            self.last_batch_failed,
            self.last_elapsed_sec,
        )

        if failures:
            raise AggregateError(failures)
        return results

    def metrics(self) -> dict[str, int | float | list[str]]:
        return {
            "batches": self.batches,
            "batch_target_count": self.last_batch_target,
            "batch_ok_count": self.last_batch_ok,
            "batch_failed_count": self.last_batch_failed,
            "batch_failed_symbols": list(self.last_failed_symbols),
            "batch_elapsed_sec": round(self.last_elapsed_sec, 3),
        }
