"""
Client for the server-side function that forwards signed Binance account
requests, so they are issued by the backend rather than the browser.
"""

from typing import Any, Dict, Optional

from src.coinboard.config import SupabaseSettings, settings
from src.coinboard.logging import get_logger
from .transport import RestTransport

logger = get_logger(__name__)


class BalanceProxyClient:
    """Posts ``{endpoint, method, params, headers}`` to the proxy function."""

    def __init__(
        self,
        config: Optional[SupabaseSettings] = None,
        transport: Optional[RestTransport] = None,
    ):
        self.config = config or settings.supabase
        self.transport = transport or RestTransport(self.config.functions_url, exchange="binance-proxy")

    def _headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.anon_key:
            headers["apikey"] = self.config.anon_key
        token = access_token or self.config.anon_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def forward(
        self,
        endpoint: str,
        method: str,
        params: Dict[str, Any],
        headers: Dict[str, str],
        access_token: Optional[str] = None,
    ) -> Any:
        payload = {
            "endpoint": endpoint,
            "method": method,
            "params": params,
            "headers": headers,
        }
        logger.debug(f"Forwarding {method} {endpoint} through {self.config.proxy_function}")
        return await self.transport.request_json(
            "POST",
            f"/{self.config.proxy_function}",
            json=payload,
            headers=self._headers(access_token),
        )

    async def close(self) -> None:
        await self.transport.close()
