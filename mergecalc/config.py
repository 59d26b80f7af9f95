"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

SUPPLY_PROVIDERS = ("coingecko", "onchain")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenConfig:
    symbol: str = ""
    product_id: str = ""
    fraction: float = 0.0
    coingecko_id: str = ""
    chain: str = ""
    contract: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class MergerConfig:
    total_new_tokens: float = 2_000_000_000
    default_amount: float = 10_000


@dataclass(frozen=True)
class PriceSourceConfig:
    spot_url: str = "https://api.coinbase.com/v2/prices/{product_id}/spot"
    timeout: float | None = None


@dataclass(frozen=True)
class SupplySourceConfig:
    provider: str = "coingecko"
    coingecko_url: str = "https://api.coingecko.com/api/v3/coins/{coin_id}"
    api_key: str = ""
    timeout: float | None = None


@dataclass(frozen=True)
class ChainConfig:
    rpc_url: str = ""
    rpc_timeout: float | None = None


@dataclass(frozen=True)
class FeedConfig:
    enabled: bool = True
    ws_url: str = "wss://advanced-trade-ws.coinbase.com"
    channel: str = "ticker"


@dataclass(frozen=True)
class PageConfig:
    title: str = "AERO/VELO Merger Calculator"
    per_token_inputs: bool = False
    allow_total_override: bool = False


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8080
    # Seconds a rendered page may wait for its socket before the view is dropped
    view_ttl: float = 300.0


@dataclass(frozen=True)
class AppConfig:
    merger: MergerConfig = field(default_factory=MergerConfig)
    tokens: tuple[TokenConfig, ...] = ()
    price_source: PriceSourceConfig = field(default_factory=PriceSourceConfig)
    supply_source: SupplySourceConfig = field(default_factory=SupplySourceConfig)
    chains: dict[str, ChainConfig] = field(default_factory=dict)
    feed: FeedConfig = field(default_factory=FeedConfig)
    page: PageConfig = field(default_factory=PageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @property
    def symbols(self) -> tuple[str, ...]:
        return tuple(t.symbol for t in self.tokens)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_REF = re.compile(r"\$\{(?P<name>\w+)(?::-(?P<fallback>[^}]*))?}")


def _env_value(match: re.Match) -> str:
    # Shell semantics: an unset or empty variable takes the fallback after ":-"
    return os.environ.get(match["name"]) or (match["fallback"] or "")


def _interpolate_env(value: Any) -> Any:
    """Fill ${VAR} and ${VAR:-fallback} references in strings, dicts and lists."""
    if isinstance(value, str):
        return _ENV_REF.sub(_env_value, value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_merger(raw: dict[str, Any]) -> MergerConfig:
    return MergerConfig(
        total_new_tokens=float(raw.get("total_new_tokens", 2_000_000_000)),
        default_amount=float(raw.get("default_amount", 10_000)),
    )


def _build_tokens(raw: list[dict[str, Any]]) -> tuple[TokenConfig, ...]:
    tokens: list[TokenConfig] = []
    for t in raw:
        symbol = str(t.get("symbol", "")).upper()
        tokens.append(
            TokenConfig(
                symbol=symbol,
                product_id=t.get("product_id") or f"{symbol}-USD",
                fraction=float(t.get("fraction", 0.0)),
                coingecko_id=t.get("coingecko_id", ""),
                chain=t.get("chain", ""),
                contract=t.get("contract", ""),
                decimals=int(t.get("decimals", 18)),
            )
        )
    return tuple(tokens)


def _build_price_source(raw: dict[str, Any]) -> PriceSourceConfig:
    return PriceSourceConfig(
        spot_url=raw.get("spot_url", PriceSourceConfig.spot_url),
        timeout=_optional_float(raw.get("timeout")),
    )


def _build_supply_source(raw: dict[str, Any]) -> SupplySourceConfig:
    return SupplySourceConfig(
        provider=raw.get("provider", "coingecko"),
        coingecko_url=raw.get("coingecko_url", SupplySourceConfig.coingecko_url),
        api_key=raw.get("api_key", ""),
        timeout=_optional_float(raw.get("timeout")),
    )


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        chains[name] = ChainConfig(
            rpc_url=cfg.get("rpc_url", ""),
            rpc_timeout=_optional_float(cfg.get("rpc_timeout")),
        )
    return chains


def _build_feed(raw: dict[str, Any]) -> FeedConfig:
    return FeedConfig(
        enabled=bool(raw.get("enabled", True)),
        ws_url=raw.get("ws_url", FeedConfig.ws_url),
        channel=raw.get("channel", "ticker"),
    )


def _build_page(raw: dict[str, Any]) -> PageConfig:
    return PageConfig(
        title=raw.get("title", PageConfig.title),
        per_token_inputs=bool(raw.get("per_token_inputs", False)),
        allow_total_override=bool(raw.get("allow_total_override", False)),
    )


def _build_server(raw: dict[str, Any]) -> ServerConfig:
    return ServerConfig(
        host=raw.get("host", "127.0.0.1"),
        port=int(raw.get("port", 8080)),
        view_ttl=float(raw.get("view_ttl", 300.0)),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)
    sources = raw.get("sources", {})

    cfg = AppConfig(
        merger=_build_merger(raw.get("merger", {})),
        tokens=_build_tokens(raw.get("tokens", [])),
        price_source=_build_price_source(sources.get("price", {})),
        supply_source=_build_supply_source(sources.get("supply", {})),
        chains=_build_chains(raw.get("chains", {})),
        feed=_build_feed(raw.get("feed", {})),
        page=_build_page(raw.get("page", {})),
        server=_build_server(raw.get("server", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if len(cfg.tokens) != 2:
        raise ValueError(
            f"Exactly two tokens must be configured, got {len(cfg.tokens)}"
        )

    symbols = cfg.symbols
    if len(set(symbols)) != len(symbols):
        raise ValueError(f"Duplicate token symbols: {', '.join(symbols)}")

    for token in cfg.tokens:
        if not token.symbol:
            raise ValueError("Token has no symbol")
        if token.fraction < 0:
            raise ValueError(f"Token '{token.symbol}' has a negative fraction")

    total_fraction = sum(t.fraction for t in cfg.tokens)
    if not math.isclose(total_fraction, 1.0, abs_tol=1e-9):
        raise ValueError(
            f"Allocation fractions must sum to 1.0, got {total_fraction}"
        )

    if cfg.merger.total_new_tokens <= 0:
        raise ValueError("total_new_tokens must be positive")

    provider = cfg.supply_source.provider
    if provider not in SUPPLY_PROVIDERS:
        raise ValueError(f"Unknown supply provider '{provider}'")

    for token in cfg.tokens:
        if provider == "coingecko" and not token.coingecko_id:
            raise ValueError(f"Token '{token.symbol}' has no coingecko_id")
        if provider == "onchain":
            if not token.contract:
                raise ValueError(f"Token '{token.symbol}' has no contract")
            if token.chain not in cfg.chains:
                raise ValueError(
                    f"Token '{token.symbol}' references unknown chain '{token.chain}'"
                )
