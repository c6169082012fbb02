"""Models, errors and symbol helpers shared across components."""

from .errors import (
    AuthenticationRequiredError,
    CoinboardError,
    DataUnavailableError,
    ErrorHandler,
    MissingCredentialsError,
    NetworkError,
    RemoteAPIError,
    RequestTimeoutError,
    UnsupportedExchangeError,
)
from .models import (
    Credential,
    Exchange,
    ExchangeCredentials,
    Notification,
    NotificationLevel,
    OrderRequest,
    OrderSide,
    PortfolioAsset,
    PortfolioSnapshot,
    PriceRecord,
)
from .symbols import normalize_symbol

__all__ = [
    "AuthenticationRequiredError",
    "CoinboardError",
    "DataUnavailableError",
    "ErrorHandler",
    "MissingCredentialsError",
    "NetworkError",
    "RemoteAPIError",
    "RequestTimeoutError",
    "UnsupportedExchangeError",
    "Credential",
    "Exchange",
    "ExchangeCredentials",
    "Notification",
    "NotificationLevel",
    "OrderRequest",
    "OrderSide",
    "PortfolioAsset",
    "PortfolioSnapshot",
    "PriceRecord",
    "normalize_symbol",
]
