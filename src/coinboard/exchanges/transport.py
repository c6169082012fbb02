"""
Shared HTTP transport for exchange REST calls.
"""

import asyncio
import time
from typing import Any, Dict, Optional

import httpx

from src.coinboard.config import settings
from src.coinboard.logging import get_logger
from src.coinboard.metrics import rest_request_duration, rest_requests_total
from src.coinboard.shared.errors import NetworkError, RemoteAPIError, RequestTimeoutError

logger = get_logger(__name__)

_ERROR_KEYS = ("msg", "message", "error_description", "error")


class RestTransport:
    """Thin wrapper over ``httpx.AsyncClient`` with a hard per-request timeout.

    Every request is bounded by ``timeout`` seconds in total; when it expires
    the request is cancelled and ``RequestTimeoutError`` is raised. Transport
    failures become ``NetworkError`` and non-2xx answers ``RemoteAPIError``.
    """

    def __init__(
        self,
        base_url: str,
        exchange: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.exchange = exchange
        self.timeout = timeout if timeout is not None else settings.market.request_timeout
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            limits=httpx.Limits(max_keepalive_connections=10),
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    def url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[str] = None,
        json: Any = None,
    ) -> httpx.Response:
        url = self.url(path)
        started = time.perf_counter()
        try:
            response = await asyncio.wait_for(
                self.client.request(
                    method, url, params=params, headers=headers, content=content, json=json
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            rest_requests_total.labels(exchange=self.exchange, outcome="timeout").inc()
            logger.warning(f"{self.exchange} {method} {path} timed out after {self.timeout}s")
            raise RequestTimeoutError(url, self.timeout, self.exchange) from e
        except httpx.HTTPError as e:
            rest_requests_total.labels(exchange=self.exchange, outcome="network_error").inc()
            logger.error(f"HTTP error on {self.exchange} {method} {path}: {e}")
            raise NetworkError(f"Could not reach {self.exchange}: {e}", self.exchange) from e
        finally:
            rest_request_duration.labels(exchange=self.exchange).observe(time.perf_counter() - started)

        outcome = "remote_error" if response.is_error else "ok"
        rest_requests_total.labels(exchange=self.exchange, outcome=outcome).inc()
        return response

    async def request_json(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and return its decoded JSON body."""
        response = await self.request(method, path, **kwargs)
        if response.is_error:
            message = self.error_message(response)
            logger.error(f"{self.exchange} {method} {path} failed ({response.status_code}): {message}")
            raise RemoteAPIError(response.status_code, message, self.exchange)
        try:
            return response.json()
        except ValueError as e:
            raise RemoteAPIError(response.status_code, "response body is not valid JSON", self.exchange) from e

    @staticmethod
    def error_message(response: httpx.Response) -> str:
        """Extract the provider-specific error message from a response."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            for key in _ERROR_KEYS:
                if body.get(key):
                    return str(body[key])
        return response.text or response.reason_phrase or "Unknown error"
