"""Exchange REST clients and request signing."""

from .binance import BinanceClient
from .coinbase import CoinbaseClient
from .proxy import BalanceProxyClient
from .signing import BinanceSigner, CoinbaseSigner, sign
from .transport import RestTransport

__all__ = [
    "BinanceClient",
    "CoinbaseClient",
    "BalanceProxyClient",
    "BinanceSigner",
    "CoinbaseSigner",
    "RestTransport",
    "sign",
]
