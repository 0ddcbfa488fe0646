from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Sequence

from fastapi import FastAPI
from pydantic import ValidationError

from quote_dashboard.api.routes import pages, router
from quote_dashboard.config.settings import describe_validation_error, get_settings
from quote_dashboard.config.tickers import TICKERS
from quote_dashboard.errors import ConfigurationError
from quote_dashboard.integrations.finnhub_rest import FinnhubRestClient
from quote_dashboard.logging_conf import setup_logging
from quote_dashboard.services.dashboard_state import DashboardStore, LoadTimeline
from quote_dashboard.services.quote_fetcher import QuoteFetcher
from quote_dashboard.services.quote_loader import QuoteLoader

logger = logging.getLogger(__name__)


def build_quote_fetcher() -> QuoteFetcher:
    """Create the fetcher from settings unless one was installed on app.state already."""
    if app.state.quote_fetcher is None:
        try:
            settings = app.state.get_settings()
        except ValidationError as exc:
            raise ConfigurationError(describe_validation_error(exc)) from exc
        app.state.quote_fetcher = QuoteFetcher(
            rest_client=FinnhubRestClient(
                api_key=settings.FINNHUB_API_KEY,
                base_url=settings.FINNHUB_BASE_URL,
                timeout=settings.FINNHUB_TIMEOUT_SEC,
            ),
            max_workers=settings.QUOTE_FETCH_MAX_WORKERS,
        )
    return app.state.quote_fetcher


def install_dashboard(
    app: FastAPI,
    *,
    symbols: Sequence[str] = TICKERS,
    quote_fetcher: QuoteFetcher | None = None,
) -> None:
    """Wire a fresh store, its load timeline and the startup loader onto app.state."""
    app.state.quote_fetcher = quote_fetcher
    app.state.dashboard_store = DashboardStore()
    app.state.load_timeline = LoadTimeline()
    app.state.dashboard_store.subscribe(app.state.load_timeline.on_state_change)
    app.state.quote_loader = QuoteLoader(
        store=app.state.dashboard_store,
        fetcher_factory=build_quote_fetcher,
        symbols=symbols,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        setup_logging(app.state.get_settings().LOG_LEVEL)
    except Exception:
        # missing credential surfaces as a FAILED dashboard once the loader runs
        setup_logging("INFO")

    app.state.quote_loader.start()
    try:
        yield
    finally:
        app.state.quote_loader.join(timeout=1.0)


app = FastAPI(title="Stock Price Dashboard", version="0.1.0", lifespan=lifespan)
app.include_router(pages)
app.include_router(router, prefix="/v1")

# NOTE: lazy-loaded so app import does not require env during tests.
app.state.get_settings = get_settings
install_dashboard(app)
