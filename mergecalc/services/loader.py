"""One-shot page-load data retrieval with all-or-nothing zero fallback."""
from __future__ import annotations

import asyncio
import logging

from ..chains.evm import OnchainSupplySource
from ..config import AppConfig
from ..interfaces import PriceSource, SupplySource
from ..models import MarketBundle, PriceQuote, SupplyFigure
from ..oracles import CoinbaseSpotSource, CoingeckoSupplySource

logger = logging.getLogger(__name__)


def build_supply_source(config: AppConfig) -> SupplySource:
    if config.supply_source.provider == "onchain":
        return OnchainSupplySource(config.chains)
    return CoingeckoSupplySource(config.supply_source)


class DataLoader:
    """Fetch both prices and both supplies for the configured token pair."""

    def __init__(
        self,
        config: AppConfig,
        price_source: PriceSource | None = None,
        supply_source: SupplySource | None = None,
    ) -> None:
        self._tokens = config.tokens
        self._price_source: PriceSource = price_source or CoinbaseSpotSource(
            config.price_source
        )
        self._supply_source: SupplySource = supply_source or build_supply_source(
            config
        )

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(t.symbol for t in self._tokens)

    async def load(self) -> MarketBundle:
        """Return the market bundle, or an all-zero bundle if any fetch fails."""
        price_calls = [self._price_source.fetch_price(t) for t in self._tokens]
        supply_calls = [self._supply_source.fetch_supply(t) for t in self._tokens]

        results = await asyncio.gather(
            *price_calls, *supply_calls, return_exceptions=True
        )

        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            for failure in failures:
                logger.error("Error fetching data: %s", failure)
            logger.warning(
                "Falling back to zeroed figures for %s", ", ".join(self.symbols)
            )
            return MarketBundle.zeroed(self.symbols)

        n = len(self._tokens)
        prices, supplies = results[:n], results[n:]
        bundle = MarketBundle(
            prices=tuple(
                PriceQuote(symbol=t.symbol, price=float(p))
                for t, p in zip(self._tokens, prices)
            ),
            supplies=tuple(
                SupplyFigure(symbol=t.symbol, supply=float(s))
                for t, s in zip(self._tokens, supplies)
            ),
        )
        logger.info(
            "Loaded market data: %s",
            "  ".join(
                f"{q.symbol} ${q.price:.4f} / {s.supply:,.0f}"
                for q, s in zip(bundle.prices, bundle.supplies)
            ),
        )
        return bundle
