from __future__ import annotations

from typing import Sequence

from quote_dashboard.schemas.quote import Quote


def normalize_query(query: str | None) -> str:
    return (query or "").strip().lower()


def filter_quotes(quotes: Sequence[Quote], query: str | None) -> list[Quote]:
    """Return the quotes whose symbol contains the query, case-insensitively, in input order."""
    needle = normalize_query(query)
    if not needle:
        return list(quotes)
    return [row for row in quotes if needle in row.symbol.lower()]
