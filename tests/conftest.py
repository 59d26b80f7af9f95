"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from mergecalc.config import (
    AppConfig,
    ChainConfig,
    FeedConfig,
    MergerConfig,
    PageConfig,
    PriceSourceConfig,
    SupplySourceConfig,
    TokenConfig,
)
from mergecalc.models import MarketBundle, PriceQuote, SupplyFigure


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def aero_token() -> TokenConfig:
    return TokenConfig(
        symbol="AERO",
        product_id="AERO-USD",
        fraction=0.945,
        coingecko_id="aerodrome-finance",
        chain="base",
        contract="0xAERO",
    )


@pytest.fixture()
def velo_token() -> TokenConfig:
    return TokenConfig(
        symbol="VELO",
        product_id="VELO-USD",
        fraction=0.055,
        coingecko_id="velodrome-finance",
        chain="optimism",
        contract="0xVELO",
    )


@pytest.fixture()
def sample_app_config(aero_token: TokenConfig, velo_token: TokenConfig) -> AppConfig:
    return AppConfig(
        merger=MergerConfig(total_new_tokens=2_000_000_000, default_amount=10_000),
        tokens=(aero_token, velo_token),
        price_source=PriceSourceConfig(
            spot_url="https://prices.example.com/{product_id}/spot"
        ),
        supply_source=SupplySourceConfig(
            provider="coingecko", coingecko_url="https://cg.example.com/coins/{coin_id}"
        ),
        chains={
            "base": ChainConfig(rpc_url="https://base.example.com"),
            "optimism": ChainConfig(rpc_url="https://op.example.com"),
        },
        feed=FeedConfig(ws_url="wss://feed.example.com"),
        page=PageConfig(title="AERO/VELO Merger Calculator"),
    )


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_bundle() -> MarketBundle:
    return MarketBundle(
        prices=(
            PriceQuote(symbol="AERO", price=1.0),
            PriceQuote(symbol="VELO", price=0.05),
        ),
        supplies=(
            SupplyFigure(symbol="AERO", supply=1_000_000_000),
            SupplyFigure(symbol="VELO", supply=1_500_000_000),
        ),
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    merger:
      total_new_tokens: 2000000000
      default_amount: 10000
    tokens:
      - symbol: AERO
        product_id: AERO-USD
        fraction: 0.945
        coingecko_id: aerodrome-finance
        chain: base
        contract: "0xaaa"
      - symbol: velo
        fraction: 0.055
        coingecko_id: velodrome-finance
        chain: optimism
        contract: "0xbbb"
    sources:
      price:
        spot_url: "https://prices.example.com/{product_id}/spot"
      supply:
        provider: coingecko
        coingecko_url: "https://cg.example.com/coins/{coin_id}"
        timeout: 15
    chains:
      base:
        rpc_url: "https://base.example.com"
      optimism:
        rpc_url: "https://op.example.com"
        rpc_timeout: 5
    feed:
      enabled: true
      ws_url: "wss://feed.example.com"
    page:
      per_token_inputs: true
      allow_total_override: true
    server:
      port: 9000
      view_ttl: 60
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
