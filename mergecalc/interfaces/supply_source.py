"""Supply source protocol: total supply abstraction."""
from typing import Protocol

from ..config import TokenConfig


class SupplySource(Protocol):
    """Abstract interface for fetching a token's total supply."""

    async def fetch_supply(self, token: TokenConfig) -> float: ...
