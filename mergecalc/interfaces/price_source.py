"""Price source protocol: spot price abstraction."""
from typing import Protocol

from ..config import TokenConfig


class PriceSource(Protocol):
    """Abstract interface for fetching a token's USD spot price."""

    async def fetch_price(self, token: TokenConfig) -> float: ...
