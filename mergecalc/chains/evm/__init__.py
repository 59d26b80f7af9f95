"""EVM chain client."""
from .client import EvmClient, OnchainSupplySource

__all__ = ["EvmClient", "OnchainSupplySource"]
