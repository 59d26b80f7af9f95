"""EVM JSON-RPC client for reading ERC-20 total supply."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ...config import ChainConfig, TokenConfig
from ...errors import DataSourceError

logger = logging.getLogger(__name__)

# keccak256("totalSupply()")[:4]
TOTAL_SUPPLY_SELECTOR = "0x18160ddd"


class EvmClient:
    """Minimal JSON-RPC client bound to a single EVM node."""

    def __init__(self, config: ChainConfig) -> None:
        self.rpc_url = config.rpc_url
        self.timeout = config.rpc_timeout

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make a single JSON-RPC call and return its ``result`` member."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(
                self.rpc_url,
                json=payload,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                if response.status != 200:
                    raise DataSourceError(
                        f"RPC {self.rpc_url}: HTTP {response.status}"
                    )
                result = await response.json()

        if "error" in result:
            raise DataSourceError(f"RPC Error: {result['error']}")
        if "result" not in result:
            raise DataSourceError(f"RPC {self.rpc_url}: response has no result")
        return result["result"]

    async def eth_call(self, to: str, data: str) -> str:
        return await self.rpc_call("eth_call", [{"to": to, "data": data}, "latest"])

    async def get_total_supply(self, contract: str, decimals: int = 18) -> float:
        """Read ``totalSupply()`` from an ERC-20 contract, scaled by decimals."""
        raw = await self.eth_call(contract, TOTAL_SUPPLY_SELECTOR)
        try:
            units = int(raw, 16)
        except (TypeError, ValueError) as e:
            raise DataSourceError(
                f"totalSupply() on {contract}: not a hex integer ({raw!r})"
            ) from e
        return units / 10**decimals


class OnchainSupplySource:
    """Supply source that reads each token's contract on its own chain."""

    def __init__(self, chains: dict[str, ChainConfig]) -> None:
        self._clients = {name: EvmClient(cfg) for name, cfg in chains.items()}

    async def fetch_supply(self, token: TokenConfig) -> float:
        client = self._clients.get(token.chain)
        if client is None:
            raise DataSourceError(f"No RPC client for chain '{token.chain}'")

        supply = await client.get_total_supply(token.contract, token.decimals)
        logger.info(
            "On-chain supply %s (%s): %s", token.symbol, token.chain, f"{supply:,.0f}"
        )
        return supply
