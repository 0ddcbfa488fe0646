from typing import Literal

from pydantic import BaseModel

from quote_dashboard.schemas.quote import Quote

FetchStatus = Literal["LOADING", "READY", "FAILED"]


class DashboardState(BaseModel):
    status: FetchStatus = "LOADING"
    quotes: list[Quote] = []
    error: str | None = None
    query: str = ""


class DashboardView(BaseModel):
    status: FetchStatus
    query: str
    quotes: list[Quote]
    total: int
    error: str | None = None
    hint: str | None = None
