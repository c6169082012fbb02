"""
Binance REST client: public market data, account balances and order placement.
"""

import time
from typing import Any, Dict, List, Optional

from src.coinboard.config import BinanceSettings, settings
from src.coinboard.logging import get_logger
from src.coinboard.shared.models import Credential, OrderRequest
from src.coinboard.shared.symbols import to_pair
from .proxy import BalanceProxyClient
from .signing import BinanceSigner, Clock, mask_secret
from .transport import RestTransport

logger = get_logger(__name__)

API_KEY_HEADER = "X-MBX-APIKEY"


class BinanceClient:
    """Client for Binance spot endpoints."""

    def __init__(
        self,
        config: Optional[BinanceSettings] = None,
        transport: Optional[RestTransport] = None,
        proxy: Optional[BalanceProxyClient] = None,
        clock: Clock = time.time,
    ):
        self.config = config or settings.binance
        self.transport = transport or RestTransport(self.config.rest_url, exchange="binance")
        self.proxy = proxy
        self.clock = clock

    async def close(self) -> None:
        await self.transport.close()

    # Public market data

    async def get_ticker_24h(self, symbol: str) -> Dict[str, Any]:
        """24h statistics for one base asset against the quote currency."""
        return await self.transport.request_json(
            "GET", "/ticker/24hr", params={"symbol": to_pair(symbol)}
        )

    async def get_all_tickers(self) -> List[Dict[str, Any]]:
        """24h statistics for every listed pair."""
        return await self.transport.request_json("GET", "/ticker/24hr")

    async def get_all_prices(self) -> List[Dict[str, Any]]:
        """Latest price for every listed pair."""
        return await self.transport.request_json("GET", "/ticker/price")

    # Signed endpoints

    async def get_balances(self, credential: Credential) -> List[Dict[str, Any]]:
        """Raw ``balances`` list of the account (``asset``, ``free``, ``locked``)."""
        signer = BinanceSigner(credential.secret_key.get_secret_value(), self.clock)
        headers = {API_KEY_HEADER: credential.api_key}
        params = signer.signed_params()

        logger.debug(f"Fetching Binance balances for key {mask_secret(credential.api_key)}")
        if self.proxy is not None:
            data = await self.proxy.forward(
                endpoint=self.config.account_endpoint,
                method="GET",
                params=params,
                headers=headers,
            )
        else:
            data = await self.transport.request_json("GET", "/account", params=params, headers=headers)

        return data.get("balances", []) if isinstance(data, dict) else []

    async def place_order(self, order: OrderRequest, credential: Credential) -> Dict[str, Any]:
        """Submit a signed LIMIT order and return the raw response body."""
        signer = BinanceSigner(credential.secret_key.get_secret_value(), self.clock)
        params = {
            "symbol": to_pair(order.symbol),
            "side": order.side.value.upper(),
            "type": "LIMIT",
            "timeInForce": "GTC",
            "quantity": order.quantity,
            "price": order.price,
        }
        query = signer.signed_query(params)

        return await self.transport.request_json(
            "POST",
            f"/order?{query}",
            headers={API_KEY_HEADER: credential.api_key},
        )
