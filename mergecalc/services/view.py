"""Per-page allocation view state."""
from __future__ import annotations

import logging

from ..allocation import allocation, compute_row, parse_amount
from ..config import AppConfig
from ..models import MarketBundle, PriceQuote, Tick, TokenRow

logger = logging.getLogger(__name__)


class AllocationView:
    """Holds one page's prices, amounts and total; derives rows on demand.

    Prices start from the loaded bundle and are only ever overwritten by
    live ticks. Supplies never change after construction.
    """

    def __init__(
        self,
        config: AppConfig,
        bundle: MarketBundle,
        amount: float | None = None,
    ) -> None:
        self._tokens = config.tokens
        self._default_total = config.merger.total_new_tokens
        self._total_override: float | None = None
        self.bundle = bundle

        self.quotes: dict[str, PriceQuote] = {
            t.symbol: PriceQuote(symbol=t.symbol, price=bundle.price_of(t.symbol))
            for t in self._tokens
        }
        start = config.merger.default_amount if amount is None else amount
        self.amounts: dict[str, float] = {t.symbol: start for t in self._tokens}

        for t in self._tokens:
            if bundle.supply_of(t.symbol) == 0:
                logger.warning(
                    "%s supply is zero; derived ratios will be non-finite", t.symbol
                )

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(t.symbol for t in self._tokens)

    @property
    def total_new_tokens(self) -> float:
        if self._total_override is not None:
            return self._total_override
        return self._default_total

    def apply_tick(self, tick: Tick) -> bool:
        """Overwrite the tracked price for ``tick.symbol``.

        Returns False (and changes nothing) for untracked symbols.
        """
        quote = self.quotes.get(tick.symbol)
        if quote is None:
            return False
        quote.price = tick.price
        return True

    def set_amount(self, text: object, symbol: str | None = None) -> None:
        """Set the input amount for one token, or for both when ``symbol`` is None."""
        value = parse_amount(text)
        if symbol is None:
            for s in self.amounts:
                self.amounts[s] = value
        elif symbol in self.amounts:
            self.amounts[symbol] = value
        else:
            logger.debug("Ignoring amount for unknown symbol %s", symbol)

    def set_total(self, text: object) -> None:
        """Override the new-token total; empty or zero input restores the default."""
        value = parse_amount(text)
        self._total_override = value if value > 0 else None

    def rows(self) -> list[TokenRow]:
        total = self.total_new_tokens
        return [
            compute_row(
                symbol=t.symbol,
                supply=self.bundle.supply_of(t.symbol),
                price=self.quotes[t.symbol].price,
                fraction=t.fraction,
                total_new_tokens=total,
                amount=self.amounts[t.symbol],
            )
            for t in self._tokens
        ]

    def allocations(self) -> list[tuple[str, float, float]]:
        """(symbol, allocated tokens, fraction) for the summary lines."""
        total = self.total_new_tokens
        return [(t.symbol, allocation(total, t.fraction), t.fraction) for t in self._tokens]
