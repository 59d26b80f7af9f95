"""HTML page and snapshot rendering for the allocation view."""
from __future__ import annotations

import math
from html import escape
from typing import Any

from ..config import PageConfig
from ..models import TokenRow
from ..services.view import AllocationView

COLUMNS = (
    "Token",
    "Total Supply",
    "Price (USD)",
    "Tokens Needed for 1 New Token",
    "Implied New Token Price (USD)",
    "New Tokens for Input Amount",
)


# ---------------------------------------------------------------------------
# Number formatting
# ---------------------------------------------------------------------------


def format_grouped(value: float, max_fraction_digits: int = 3) -> str:
    """Thousands-separated with trailing fraction zeros dropped."""
    if not math.isfinite(value):
        return str(value)
    text = f"{value:,.{max_fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def format_usd(value: float) -> str:
    if not math.isfinite(value):
        return f"${value}"
    return f"${value:.4f}"


def format_ratio(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    return f"{value:.6f}"


def format_percent(fraction: float) -> str:
    return format_grouped(fraction * 100, 2) + "%"


def _is_degenerate(row: TokenRow) -> bool:
    return not all(
        math.isfinite(v)
        for v in (row.exchange_ratio, row.implied_price, row.new_tokens_for_input)
    )


def format_row(row: TokenRow) -> dict[str, Any]:
    return {
        "symbol": row.symbol,
        "supply": format_grouped(row.supply),
        "price": format_usd(row.price),
        "exchange_ratio": format_ratio(row.exchange_ratio),
        "implied_price": format_usd(row.implied_price),
        "new_tokens": format_grouped(row.new_tokens_for_input, 2),
        "degenerate": _is_degenerate(row),
    }


def allocation_lines(view: AllocationView) -> list[dict[str, str]]:
    return [
        {
            "symbol": symbol,
            "text": (
                f"{symbol} Allocation: {format_grouped(allocated)} tokens "
                f"({format_percent(fraction)})"
            ),
        }
        for symbol, allocated, fraction in view.allocations()
    ]


def snapshot(view: AllocationView) -> dict[str, Any]:
    """Preformatted state pushed to the browser after every change."""
    return {
        "type": "snapshot",
        "total": format_grouped(view.total_new_tokens),
        "rows": [format_row(r) for r in view.rows()],
        "allocations": allocation_lines(view),
    }


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------

_STYLE = """
body { font-family: Arial, sans-serif; margin: 20px; }
#input-section { margin-bottom: 20px; }
#input-section label { margin-right: 8px; }
#input-section input { margin-right: 16px; }
table { border-collapse: collapse; width: 100%; }
th, td { border: 1px solid #ddd; padding: 8px; }
th { background-color: #f2f2f2; }
tr.degenerate td { color: #b00; }
#feed-status { color: #888; font-size: 0.9em; }
"""

_SCRIPT = """
(function () {
  var root = document.getElementById("calculator");
  var proto = location.protocol === "https:" ? "wss://" : "ws://";
  var ws = new WebSocket(proto + location.host + "/ws?view=" + root.dataset.view);
  var status = document.getElementById("feed-status");

  function send(frame) {
    if (ws.readyState === WebSocket.OPEN) { ws.send(JSON.stringify(frame)); }
  }

  document.querySelectorAll("input[data-kind]").forEach(function (input) {
    input.addEventListener("input", function () {
      var frame = {type: input.dataset.kind, value: input.value};
      if (input.dataset.symbol) { frame.symbol = input.dataset.symbol; }
      send(frame);
    });
  });

  ws.onopen = function () { status.textContent = "live"; };
  ws.onclose = function () { status.textContent = "disconnected"; };
  ws.onmessage = function (event) {
    var data = JSON.parse(event.data);
    if (data.type !== "snapshot") { return; }
    data.rows.forEach(function (row) {
      var tr = document.getElementById("row-" + row.symbol);
      if (!tr) { return; }
      tr.className = row.degenerate ? "degenerate" : "";
      ["supply", "price", "exchange_ratio", "implied_price", "new_tokens"].forEach(function (key) {
        tr.querySelector("[data-col=" + key + "]").textContent = row[key];
      });
    });
    data.allocations.forEach(function (line) {
      var p = document.getElementById("alloc-" + line.symbol);
      if (p) { p.textContent = line.text; }
    });
    document.getElementById("alloc-total").textContent = data.total;
  };
})();
"""


def _input(input_id: str, label: str, value: str, kind: str, symbol: str = "") -> str:
    symbol_attr = f' data-symbol="{escape(symbol)}"' if symbol else ""
    return (
        f'<label for="{input_id}">{escape(label)}</label>'
        f'<input type="number" id="{input_id}" value="{escape(value)}" min="0" '
        f'data-kind="{kind}"{symbol_attr} />'
    )


def _inputs(view: AllocationView, page: PageConfig) -> str:
    parts: list[str] = []
    if page.per_token_inputs:
        for symbol in view.symbols:
            parts.append(
                _input(
                    f"amount-{symbol}",
                    f"{symbol} Amount:",
                    format_grouped(view.amounts[symbol]).replace(",", ""),
                    "amount",
                    symbol,
                )
            )
    else:
        first = view.amounts[view.symbols[0]]
        parts.append(
            _input("amount", "Enter Amount:", format_grouped(first).replace(",", ""), "amount")
        )
    if page.allow_total_override:
        parts.append(
            _input(
                "total",
                "Total New Tokens:",
                format_grouped(view.total_new_tokens).replace(",", ""),
                "total",
            )
        )
    return "".join(parts)


def _row_html(cells: dict[str, Any]) -> str:
    cls = ' class="degenerate"' if cells["degenerate"] else ""
    tds = "".join(
        f'<td data-col="{key}">{escape(cells[key])}</td>'
        for key in ("supply", "price", "exchange_ratio", "implied_price", "new_tokens")
    )
    symbol = escape(cells["symbol"])
    return f'<tr id="row-{symbol}"{cls}><td>{symbol}</td>{tds}</tr>'


def render_page(view: AllocationView, page: PageConfig, view_id: str) -> str:
    """Full HTML document for one view."""
    state = snapshot(view)
    head = "".join(f"<th>{escape(c)}</th>" for c in COLUMNS)
    body = "".join(_row_html(r) for r in state["rows"])
    allocs = "".join(
        f'<p id="alloc-{escape(line["symbol"])}">{escape(line["text"])}</p>'
        for line in state["allocations"]
    )
    title = escape(page.title)

    return (
        "<!DOCTYPE html>"
        f"<html><head><meta charset=\"utf-8\"><title>{title}</title>"
        f"<style>{_STYLE}</style></head>"
        f'<body><div id="calculator" data-view="{escape(view_id)}">'
        f"<h1>{title}</h1>"
        f'<div id="input-section">{_inputs(view, page)}</div>'
        '<div id="results">'
        '<h2>Real-Time Data <span id="feed-status">connecting</span></h2>'
        f"<table><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
        f'<h2>Merger Allocations (Based on <span id="alloc-total">{state["total"]}</span>'
        " New Tokens)</h2>"
        f"{allocs}"
        "</div></div>"
        f"<script>{_SCRIPT}</script>"
        "</body></html>"
    )
