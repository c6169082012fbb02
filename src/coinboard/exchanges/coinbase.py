"""
Coinbase REST client: account balances and order placement.
"""

import time
from typing import Any, Dict, List, Optional

from src.coinboard.config import CoinbaseSettings, settings
from src.coinboard.logging import get_logger
from src.coinboard.shared.models import Credential, OrderRequest
from src.coinboard.shared.symbols import to_product_id
from .signing import Clock, CoinbaseSigner, format_number, mask_secret
from .transport import RestTransport

logger = get_logger(__name__)


class CoinbaseClient:
    """Client for Coinbase Exchange endpoints."""

    def __init__(
        self,
        config: Optional[CoinbaseSettings] = None,
        transport: Optional[RestTransport] = None,
        clock: Clock = time.time,
    ):
        self.config = config or settings.coinbase
        self.transport = transport or RestTransport(self.config.rest_url, exchange="coinbase")
        self.clock = clock

    async def close(self) -> None:
        await self.transport.close()

    def _signer(self, credential: Credential) -> CoinbaseSigner:
        return CoinbaseSigner(credential.api_key, credential.secret_key.get_secret_value(), self.clock)

    async def get_accounts(self, credential: Credential) -> List[Dict[str, Any]]:
        """Raw account list (``currency``, ``balance``, ...)."""
        path = "/accounts"
        headers = self._signer(credential).headers("GET", path)

        logger.debug(f"Fetching Coinbase accounts for key {mask_secret(credential.api_key)}")
        data = await self.transport.request_json("GET", path, headers=headers)
        return data if isinstance(data, list) else []

    async def place_order(self, order: OrderRequest, credential: Credential) -> Dict[str, Any]:
        """Submit a signed limit order and return the raw response body."""
        path = "/orders"
        body = CoinbaseSigner.encode_body({
            "product_id": to_product_id(order.symbol),
            "side": order.side.value,
            "price": format_number(order.price),
            "size": format_number(order.quantity),
            "type": "limit",
        })
        headers = self._signer(credential).headers("POST", path, body)

        return await self.transport.request_json("POST", path, headers=headers, content=body)
