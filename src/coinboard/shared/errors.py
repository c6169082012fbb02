"""
Error hierarchy shared by every component.
"""

from datetime import datetime
from typing import Optional


class CoinboardError(Exception):
    """Base exception for dashboard errors."""

    def __init__(self, message: str, exchange: Optional[str] = None):
        self.exchange = exchange
        self.timestamp = datetime.utcnow()
        super().__init__(message)


class NetworkError(CoinboardError):
    """Raised when a request could not reach the remote service."""

    pass


class RequestTimeoutError(NetworkError):
    """Raised when a request was aborted because its timeout expired."""

    def __init__(self, url: str, timeout: float, exchange: Optional[str] = None):
        self.url = url
        self.timeout = timeout
        super().__init__(f"Request to {url} timed out after {timeout:g}s", exchange)


class RemoteAPIError(CoinboardError):
    """Raised when a remote API answers with a non-success status."""

    def __init__(self, status_code: int, remote_message: str, exchange: Optional[str] = None):
        self.status_code = status_code
        self.remote_message = remote_message
        super().__init__(f"Remote API error ({status_code}): {remote_message}", exchange)


class DataUnavailableError(CoinboardError):
    """Raised when market data could not be fetched or parsed.

    ``reason`` is one of ``timeout``, ``network``, ``remote`` or ``parse``.
    """

    def __init__(self, message: str, reason: str, exchange: Optional[str] = None):
        self.reason = reason
        super().__init__(message, exchange)


class MissingCredentialsError(CoinboardError):
    """Raised when an operation needs API keys that are not configured."""

    def __init__(self, exchange: str):
        super().__init__(f"No API keys configured for {exchange}", exchange)


class UnsupportedExchangeError(CoinboardError):
    """Raised when an order names an exchange that is not supported."""

    def __init__(self, exchange: str):
        super().__init__(f"Exchange {exchange} is not supported", exchange)


class AuthenticationRequiredError(CoinboardError):
    """Raised when an operation needs a signed-in user."""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class ErrorHandler:
    """Maps errors to the messages shown to the user."""

    @staticmethod
    def user_message(error: Exception) -> str:
        if isinstance(error, AuthenticationRequiredError):
            return "Please sign in to continue"
        if isinstance(error, MissingCredentialsError):
            return f"Add your {error.exchange} API keys in settings first"
        if isinstance(error, UnsupportedExchangeError):
            return f"{error.exchange} is not supported"
        if isinstance(error, DataUnavailableError):
            if error.reason == "timeout":
                return "Market data timed out, try again"
            return "Market data is unavailable right now"
        if isinstance(error, RequestTimeoutError):
            return "The exchange did not respond in time"
        if isinstance(error, NetworkError):
            return "Could not reach the exchange"
        if isinstance(error, RemoteAPIError):
            return f"Exchange rejected the request: {error.remote_message}"
        return "Something went wrong"
