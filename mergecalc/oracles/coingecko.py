"""CoinGecko total supply source."""
import logging
import math
import ssl

import aiohttp
import certifi

from ..config import SupplySourceConfig, TokenConfig
from ..errors import DataSourceError

logger = logging.getLogger(__name__)


class CoingeckoSupplySource:
    """Fetch total supply from CoinGecko coin market data."""

    def __init__(self, config: SupplySourceConfig) -> None:
        self.coin_url = config.coingecko_url
        self.api_key = config.api_key
        self.timeout = config.timeout

    def _headers(self) -> dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def fetch_supply(self, token: TokenConfig) -> float:
        """Return ``market_data.total_supply`` for ``token.coingecko_id``."""
        url = self.coin_url.format(coin_id=token.coingecko_id)
        params = {
            "localization": "false",
            "tickers": "false",
            "community_data": "false",
            "developer_data": "false",
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise DataSourceError(
                        f"CoinGecko {token.coingecko_id}: HTTP {response.status}"
                    )
                data = await response.json()

        try:
            raw = data["market_data"]["total_supply"]
            if raw is None:
                raise ValueError("total_supply is null")
            supply = float(raw)
        except (KeyError, TypeError, ValueError) as e:
            raise DataSourceError(
                f"CoinGecko {token.coingecko_id}: unexpected body ({e!r})"
            ) from e

        if supply < 0 or not math.isfinite(supply):
            raise DataSourceError(
                f"CoinGecko {token.coingecko_id}: invalid supply {supply}"
            )

        logger.info("Supply %s: %s", token.symbol, f"{supply:,.0f}")
        return supply
