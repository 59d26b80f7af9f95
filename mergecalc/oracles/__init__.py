"""Off-chain price and supply sources."""
from .coinbase import CoinbaseSpotSource
from .coingecko import CoingeckoSupplySource

__all__ = ["CoinbaseSpotSource", "CoingeckoSupplySource"]
