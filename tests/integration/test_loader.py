"""Integration tests for the data loader: all-or-nothing fallback."""
from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from mergecalc.chains.evm import OnchainSupplySource
from mergecalc.config import AppConfig, SupplySourceConfig
from mergecalc.errors import DataSourceError
from mergecalc.oracles import CoingeckoSupplySource
from mergecalc.services.loader import DataLoader, build_supply_source


def _price_source(prices: dict[str, float], fail: set[str] | None = None) -> AsyncMock:
    async def fetch_price(token):
        if fail and token.symbol in fail:
            raise DataSourceError(f"{token.symbol} price down")
        return prices[token.symbol]

    source = AsyncMock()
    source.fetch_price = AsyncMock(side_effect=fetch_price)
    return source


def _supply_source(supplies: dict[str, float], fail: set[str] | None = None) -> AsyncMock:
    async def fetch_supply(token):
        if fail and token.symbol in fail:
            raise ConnectionError(f"{token.symbol} supply down")
        return supplies[token.symbol]

    source = AsyncMock()
    source.fetch_supply = AsyncMock(side_effect=fetch_supply)
    return source


PRICES = {"AERO": 1.0, "VELO": 0.05}
SUPPLIES = {"AERO": 1_000_000_000.0, "VELO": 1_500_000_000.0}


class TestLoad:
    @pytest.mark.asyncio
    async def test_success(self, sample_app_config: AppConfig) -> None:
        loader = DataLoader(
            sample_app_config, _price_source(PRICES), _supply_source(SUPPLIES)
        )
        bundle = await loader.load()

        assert bundle.price_of("AERO") == 1.0
        assert bundle.price_of("VELO") == 0.05
        assert bundle.supply_of("AERO") == 1_000_000_000.0
        assert bundle.supply_of("VELO") == 1_500_000_000.0
        assert not bundle.is_zeroed

    @pytest.mark.asyncio
    async def test_fetches_all_four_values(self, sample_app_config: AppConfig) -> None:
        prices = _price_source(PRICES)
        supplies = _supply_source(SUPPLIES)
        await DataLoader(sample_app_config, prices, supplies).load()

        assert prices.fetch_price.await_count == 2
        assert supplies.fetch_supply.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "price_fail, supply_fail",
        [
            ({"AERO"}, None),
            ({"VELO"}, None),
            (None, {"AERO"}),
            (None, {"VELO"}),
            ({"AERO", "VELO"}, {"AERO", "VELO"}),
        ],
    )
    async def test_any_failure_zeroes_everything(
        self,
        sample_app_config: AppConfig,
        price_fail: set[str] | None,
        supply_fail: set[str] | None,
    ) -> None:
        loader = DataLoader(
            sample_app_config,
            _price_source(PRICES, fail=price_fail),
            _supply_source(SUPPLIES, fail=supply_fail),
        )
        bundle = await loader.load()

        assert bundle.is_zeroed
        assert [q.symbol for q in bundle.prices] == ["AERO", "VELO"]
        assert [s.symbol for s in bundle.supplies] == ["AERO", "VELO"]

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(
        self, sample_app_config: AppConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        loader = DataLoader(
            sample_app_config,
            _price_source(PRICES, fail={"VELO"}),
            _supply_source(SUPPLIES),
        )
        with caplog.at_level(logging.ERROR):
            await loader.load()

        assert "Error fetching data" in caplog.text
        assert "VELO price down" in caplog.text


class TestBuildSupplySource:
    def test_coingecko_default(self, sample_app_config: AppConfig) -> None:
        assert isinstance(build_supply_source(sample_app_config), CoingeckoSupplySource)

    def test_onchain(self, sample_app_config: AppConfig) -> None:
        cfg = AppConfig(
            merger=sample_app_config.merger,
            tokens=sample_app_config.tokens,
            supply_source=SupplySourceConfig(provider="onchain"),
            chains=sample_app_config.chains,
        )
        assert isinstance(build_supply_source(cfg), OnchainSupplySource)
