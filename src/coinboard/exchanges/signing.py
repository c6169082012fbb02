"""
Request signing for exchange-authenticated calls.

Both supported exchanges use HMAC-SHA256 with a hex digest, but over a
different canonical string:

* Binance signs the URL-encoded query string (parameters in insertion order,
  millisecond ``timestamp`` included); ``signature`` is appended afterwards.
* Coinbase signs ``timestamp + METHOD + path + body`` with the timestamp in
  whole seconds and the body exactly as sent.
"""

import hashlib
import hmac
import json
import time
from decimal import Decimal
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlencode

Clock = Callable[[], float]


def sign(payload: str, secret: str) -> str:
    """HMAC-SHA256 of ``payload`` keyed with ``secret``, hex encoded."""
    return hmac.new(
        secret.encode("utf-8"),
        payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def format_number(value: Any) -> str:
    """Render a number the way it must appear in a signed payload.

    ``1.0 -> "1"``, ``0.50 -> "0.5"``, ``100 -> "100"``.
    """
    if isinstance(value, bool):
        raise TypeError("booleans are not numbers here")
    if isinstance(value, (int, float, Decimal)):
        return format(Decimal(str(value)).normalize(), "f")
    return str(value)


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Render a key for logs without exposing it."""
    if not value:
        return "<unset>"
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}{'*' * 8}"


class BinanceSigner:
    """Builds signed query strings for Binance."""

    def __init__(self, secret: str, clock: Clock = time.time):
        self._secret = secret
        self._clock = clock

    def timestamp(self) -> int:
        return int(self._clock() * 1000)

    def signed_params(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
        """Return ``params`` plus ``timestamp`` and ``signature``.

        The returned dict preserves insertion order, so ``urlencode`` of it
        reproduces the signed string followed by ``&signature=...``.
        """
        query: Dict[str, str] = {k: format_number(v) for k, v in (params or {}).items()}
        if "timestamp" not in query:
            query["timestamp"] = str(self.timestamp())
        query["signature"] = sign(urlencode(query), self._secret)
        return query

    def signed_query(self, params: Optional[Dict[str, Any]] = None) -> str:
        return urlencode(self.signed_params(params))


class CoinbaseSigner:
    """Builds ``CB-ACCESS-*`` headers for Coinbase."""

    def __init__(self, api_key: str, secret: str, clock: Clock = time.time):
        self._api_key = api_key
        self._secret = secret
        self._clock = clock

    def timestamp(self) -> int:
        return int(self._clock())

    @staticmethod
    def encode_body(body: Optional[Dict[str, Any]]) -> str:
        if body is None:
            return ""
        return json.dumps(body, separators=(",", ":"))

    @staticmethod
    def prehash(timestamp: int, method: str, path: str, body: str = "") -> str:
        return f"{timestamp}{method.upper()}{path}{body}"

    def headers(self, method: str, path: str, body: str = "") -> Dict[str, str]:
        timestamp = self.timestamp()
        signature = sign(self.prehash(timestamp, method, path, body), self._secret)
        headers = {
            "CB-ACCESS-KEY": self._api_key,
            "CB-ACCESS-SIGN": signature,
            "CB-ACCESS-TIMESTAMP": str(timestamp),
        }
        if body:
            headers["Content-Type"] = "application/json"
        return headers
