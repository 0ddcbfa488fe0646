from __future__ import annotations

import math

from pydantic import BaseModel, field_validator


class Quote(BaseModel):
    symbol: str
    price: float | None = None
    change_pct: float | None = None

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, value: str) -> str:
        symbol = value.strip().upper()
        if not symbol:
            raise ValueError("symbol must not be empty")
        return symbol

    @field_validator("price", "change_pct")
    @classmethod
    def drop_non_finite(cls, value: float | None) -> float | None:
        if value is None or not math.isfinite(value):
            return None
        return value
