from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Sequence

from quote_dashboard.errors import DEFAULT_FAILURE_MESSAGE, InvalidStateTransitionError
from quote_dashboard.schemas.dashboard import DashboardState
from quote_dashboard.schemas.quote import Quote
from quote_dashboard.services.quote_filter import filter_quotes

logger = logging.getLogger(__name__)

Listener = Callable[[DashboardState], None]


def initial_state() -> DashboardState:
    return DashboardState()


def _ensure_loading(state: DashboardState, target: str) -> None:
    if state.status != "LOADING":
        raise InvalidStateTransitionError(f"{state.status} -> {target}")


def mark_ready(state: DashboardState, quotes: Sequence[Quote]) -> DashboardState:
    _ensure_loading(state, "READY")
    return state.model_copy(update={"status": "READY", "quotes": list(quotes), "error": None})


def mark_failed(state: DashboardState, message: str | None) -> DashboardState:
    _ensure_loading(state, "FAILED")
    text = (message or "").strip() or DEFAULT_FAILURE_MESSAGE
    return state.model_copy(update={"status": "FAILED", "quotes": [], "error": text})


def with_query(state: DashboardState, query: str | None) -> DashboardState:
    return state.model_copy(update={"query": query or ""})


def visible_quotes(state: DashboardState) -> list[Quote]:
    return filter_quotes(state.quotes, state.query)


class DashboardStore:
    """Holds the current dashboard state; transitions are pure functions applied under a lock."""

    def __init__(self, state: DashboardState | None = None) -> None:
        self._lock = threading.Lock()
        self._state = state or initial_state()
        self._listeners: list[Listener] = []

    def snapshot(self) -> DashboardState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def apply(self, transition: Callable[..., DashboardState], *args) -> DashboardState:
        with self._lock:
            previous = self._state.status
            self._state = transition(self._state, *args)
            current = self._state.model_copy(deep=True)
            listeners = list(self._listeners)

        if current.status != previous:
            logger.info("[DASHBOARD][state_change] from=%s to=%s", previous, current.status)
        for listener in listeners:
            listener(current)
        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe


class LoadTimeline:
    """Store subscriber recording how long the startup fetch cycle took to resolve."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self.loading_since = clock()
        self.resolved_status: str | None = None
        self.load_elapsed_sec: float | None = None

    def on_state_change(self, state: DashboardState) -> None:
        if state.status == "LOADING" or self.resolved_status is not None:
            return
        self.resolved_status = state.status
        self.load_elapsed_sec = self._clock() - self.loading_since

    def metrics(self) -> dict[str, str | float | None]:
        elapsed = self.load_elapsed_sec
        return {
            "resolved_status": self.resolved_status,
            "load_elapsed_sec": round(elapsed, 3) if elapsed is not None else None,
        }
