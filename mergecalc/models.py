"""Data models."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class PriceQuote:
    """Latest USD price for a token; overwritten in place by live ticks."""

    symbol: str
    price: float


@dataclass(frozen=True)
class SupplyFigure:
    """Total supply of a token, fixed for the lifetime of a view."""

    symbol: str
    supply: float


@dataclass(frozen=True)
class MarketBundle:
    """Prices and supplies fetched once at page load."""

    prices: tuple[PriceQuote, ...]
    supplies: tuple[SupplyFigure, ...]

    @classmethod
    def zeroed(cls, symbols: tuple[str, ...] | list[str]) -> MarketBundle:
        return cls(
            prices=tuple(PriceQuote(symbol=s, price=0.0) for s in symbols),
            supplies=tuple(SupplyFigure(symbol=s, supply=0.0) for s in symbols),
        )

    def price_of(self, symbol: str) -> float:
        for quote in self.prices:
            if quote.symbol == symbol:
                return quote.price
        raise KeyError(symbol)

    def supply_of(self, symbol: str) -> float:
        for figure in self.supplies:
            if figure.symbol == symbol:
                return figure.supply
        raise KeyError(symbol)

    @property
    def is_zeroed(self) -> bool:
        return all(q.price == 0 for q in self.prices) and all(
            s.supply == 0 for s in self.supplies
        )


@dataclass(frozen=True)
class Tick:
    """One price update parsed from the push feed."""

    symbol: str
    price: float


@dataclass(frozen=True)
class TokenRow:
    """Derived figures for one token, recomputed on every render."""

    symbol: str
    supply: float
    price: float
    fraction: float
    allocation: float
    exchange_ratio: float
    implied_price: float
    new_tokens_for_input: float
