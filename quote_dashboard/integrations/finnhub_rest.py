from __future__ import annotations

import math
from typing import Any, Dict, Optional

import requests

from quote_dashboard.config.settings import DEFAULT_FINNHUB_BASE_URL


class FinnhubRestClient:
    """Finnhub REST quote client; one GET per symbol, token passed as a query parameter."""

    def __init__(
        self,
        api_key: str,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")

        self.api_key = api_key
        self.base_url = (base_url or DEFAULT_FINNHUB_BASE_URL).rstrip("/")
        self.session = session or requests
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"FinnhubRestClient(base_url={self.base_url!r})"

    def _redact(self, text: str) -> str:
        return text.replace(self.api_key, "***")

    @staticmethod
    def _to_optional_float(value: Any) -> Optional[float]:
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return number

    def get_quote(self, symbol: str) -> Dict[str, Any]:
        try:
            response = self.session.get(
                f"{self.base_url}/quote",
                params={"symbol": symbol, "token": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            # requests embeds the full URL, token included, in its messages
            raise type(exc)(self._redact(str(exc)), response=exc.response) from None
        try:
            payload = response.json()
        except ValueError as exc:
            raise ValueError(f"malformed quote payload for {symbol}: body is not JSON") from exc

        if not isinstance(payload, dict):
            raise ValueError(f"malformed quote payload for {symbol}: expected an object")
        if "c" not in payload:
            raise ValueError(f"malformed quote payload for {symbol}: missing current price")

        price = self._to_optional_float(payload.get("c"))
        # unknown symbols come back as c=0 with a zero timestamp
        if price == 0.0 and not payload.get("t"):
            price = None

        return {
            "symbol": symbol,
            "price": price,
            "change_pct": self._to_optional_float(payload.get("dp")),
        }
