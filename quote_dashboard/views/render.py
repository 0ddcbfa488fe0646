from __future__ import annotations

from html import escape
from typing import Sequence

from quote_dashboard.errors import DEFAULT_FAILURE_MESSAGE
from quote_dashboard.schemas.dashboard import DashboardState
from quote_dashboard.schemas.quote import Quote

PLACEHOLDER = "—"
ERROR_HINT = "(Check your API key / rate limit.)"
SEARCH_PLACEHOLDER = "Search ticker (e.g. NVDA)"


def format_price(price: float | None) -> str:
    if price is None:
        return PLACEHOLDER
    return f"{price:.2f}"


def _rounded_change(change_pct: float) -> float:
    # -0.001 and -0.0 both display as a flat 0.00%
    return round(change_pct, 2) + 0.0


def format_change(change_pct: float | None) -> str:
    if change_pct is None:
        return PLACEHOLDER
    value = _rounded_change(change_pct)
    if value > 0:
        return f"+{value:.2f}%"
    if value == 0:
        return "0.00%"
    return f"{value:.2f}%"


def change_class(change_pct: float | None) -> str:
    if change_pct is None:
        return "flat"
    value = _rounded_change(change_pct)
    if value == 0:
        return "flat"
    return "up" if value > 0 else "down"


def _render_row(row: Quote) -> str:
    return (
        "<tr>"
        f'<td class="symbol">{escape(row.symbol)}</td>'
        f'<td class="price">{format_price(row.price)}</td>'
        f'<td><span class="change {change_class(row.change_pct)}">{format_change(row.change_pct)}</span></td>'
        "</tr>"
    )


def render_table(rows: Sequence[Quote]) -> str:
    body = "".join(_render_row(row) for row in rows)
    if not rows:
        body = '<tr><td colspan="3" class="empty">No matches.</td></tr>'
    return (
        '<table class="quotes">'
        "<thead><tr><th>Symbol</th><th>Price ($)</th><th>% Change (24h)</th></tr></thead>"
        f"<tbody>{body}</tbody>"
        "</table>"
    )


def render_content(state: DashboardState, rows: Sequence[Quote]) -> str:
    """HTML for the content section: spinner, error panel or data table."""
    if state.status == "LOADING":
        return (
            '<div class="loading" data-status="LOADING">'
            '<div class="spinner"></div>'
            "<p>Fetching latest market data…</p>"
            "</div>"
        )
    if state.status == "FAILED":
        return (
            '<div class="error" data-status="FAILED">'
            "<p><strong>Error loading data</strong></p>"
            f"<p>{escape(state.error or DEFAULT_FAILURE_MESSAGE)}</p>"
            f'<p class="hint">{escape(ERROR_HINT)}</p>'
            "</div>"
        )
    return f'<div data-status="READY">{render_table(rows)}</div>'


_STYLES = """
body { background: #030712; color: #e5e7eb; font-family: system-ui, sans-serif; }
main { max-width: 56rem; margin: 2rem auto; padding: 0 1rem; }
.card { background: #111827; border: 1px solid #1f2937; border-radius: 1rem; padding: 1.5rem; }
header { display: flex; flex-wrap: wrap; gap: 1rem; justify-content: space-between; align-items: center; }
h1 { font-size: 1.25rem; margin: 0; color: #fff; }
.subtitle { color: #9ca3af; font-size: .875rem; margin: .25rem 0 0; }
input { background: #1f2937; color: #f3f4f6; border: 0; border-radius: .75rem; padding: .5rem 1rem; width: 16rem; }
table { width: 100%; border-collapse: collapse; font-size: .875rem; margin-top: 1.5rem; }
th { text-align: left; color: #9ca3af; font-size: .75rem; text-transform: uppercase; padding: .75rem 1.5rem .75rem 0; border-bottom: 1px solid #374151; }
td { padding: .75rem 1.5rem .75rem 0; border-bottom: 1px solid #1f2937; font-variant-numeric: tabular-nums; }
td.symbol { font-weight: 600; color: #fff; }
td.empty { text-align: center; color: #6b7280; padding: 2.5rem 0; }
.change { border-radius: .5rem; padding: .25rem .5rem; font-size: .75rem; }
.change.up { background: rgba(20, 83, 45, .3); color: #86efac; }
.change.down { background: rgba(127, 29, 29, .3); color: #fca5a5; }
.change.flat { background: #1f2937; color: #d1d5db; }
.loading { text-align: center; color: #9ca3af; padding: 4rem 0; font-size: .875rem; }
.spinner { width: 2rem; height: 2rem; margin: 0 auto .75rem; border: 2px solid #4b5563; border-top-color: transparent; border-radius: 50%; animation: spin 1s linear infinite; }
@keyframes spin { to { transform: rotate(360deg); } }
.error { background: rgba(127, 29, 29, .3); border: 1px solid #b91c1c; border-radius: .75rem; padding: 1rem; color: #fca5a5; font-size: .875rem; margin-top: 1.5rem; }
.error .hint { font-size: .75rem; color: #ef4444; }
footer { margin-top: 1.5rem; font-size: 11px; color: #6b7280; text-align: center; }
"""

# Re-renders the content section on every keystroke and polls while the fetch is pending.
# Only the response to the latest request is rendered; a single poll timer is kept.
_SCRIPT = """
const input = document.getElementById("search");
const content = document.getElementById("content");
let latest = 0;
let pollTimer = null;
function schedulePoll() {
  if (pollTimer === null && content.querySelector('[data-status="LOADING"]')) {
    pollTimer = setTimeout(() => { pollTimer = null; refresh(); }, 1000);
  }
}
async function refresh() {
  const seq = ++latest;
  const res = await fetch("/fragments/content?q=" + encodeURIComponent(input.value));
  const html = await res.text();
  if (seq !== latest) {
    return;
  }
  content.innerHTML = html;
  schedulePoll();
}
input.addEventListener("input", refresh);
schedulePoll();
"""


def render_page(state: DashboardState, rows: Sequence[Quote]) -> str:
    return (
        "<!doctype html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        "<title>Stock Price Dashboard</title>"
        f"<style>{_STYLES}</style>"
        "</head><body><main><div class=\"card\">"
        "<header><div>"
        "<h1>Stock Price Dashboard</h1>"
        '<p class="subtitle">Live quotes for popular tickers.</p>'
        "</div>"
        f'<input id="search" type="search" autocomplete="off" placeholder="{escape(SEARCH_PLACEHOLDER)}" '
        f'value="{escape(state.query)}">'
        "</header>"
        f'<section id="content">{render_content(state, rows)}</section>'
        "<footer>Data from Finnhub</footer>"
        "</div></main>"
        f"<script>{_SCRIPT}</script>"
        "</body></html>"
    )
