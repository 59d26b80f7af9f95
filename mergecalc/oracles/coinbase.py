"""Coinbase spot price source."""
import logging
import math
import ssl

import aiohttp
import certifi

from ..config import PriceSourceConfig, TokenConfig
from ..errors import DataSourceError

logger = logging.getLogger(__name__)


class CoinbaseSpotSource:
    """Fetch USD spot prices from the Coinbase public prices API."""

    def __init__(self, config: PriceSourceConfig) -> None:
        self.spot_url = config.spot_url
        self.timeout = config.timeout

    async def fetch_price(self, token: TokenConfig) -> float:
        """Return the spot price for ``token.product_id``.

        Raises:
            DataSourceError: on HTTP errors or a malformed body.
        """
        url = self.spot_url.format(product_id=token.product_id)

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(
                url, timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                if response.status != 200:
                    raise DataSourceError(
                        f"Coinbase spot {token.product_id}: HTTP {response.status}"
                    )
                data = await response.json()

        try:
            price = float(data["data"]["amount"])
        except (KeyError, TypeError, ValueError) as e:
            raise DataSourceError(
                f"Coinbase spot {token.product_id}: unexpected body ({e!r})"
            ) from e

        if price < 0 or not math.isfinite(price):
            raise DataSourceError(
                f"Coinbase spot {token.product_id}: invalid price {price}"
            )

        logger.info("Spot %s: $%.4f", token.product_id, price)
        return price
