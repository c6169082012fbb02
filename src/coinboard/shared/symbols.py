"""
Symbol normalization shared by the fetch, stream and portfolio paths.
"""

from src.coinboard.config import settings

QUOTE_CURRENCY = settings.market.quote_currency


def normalize_symbol(raw: str, quote: str = QUOTE_CURRENCY) -> str:
    """Strip the quote-currency suffix from a pair or asset name.

    ``"btcusdt" -> "BTC"``, ``"ETH" -> "ETH"``. A bare quote asset
    (``"USDT"``) is returned unchanged.
    """
    symbol = raw.strip().upper()
    quote = quote.upper()
    if symbol.endswith(quote) and len(symbol) > len(quote):
        return symbol[: -len(quote)]
    return symbol


def to_pair(symbol: str, quote: str = QUOTE_CURRENCY) -> str:
    """``"BTC" -> "BTCUSDT"``."""
    return f"{normalize_symbol(symbol, quote)}{quote.upper()}"


def to_product_id(symbol: str, quote: str = QUOTE_CURRENCY) -> str:
    """Coinbase product naming, ``"BTC" -> "BTC-USDT"``."""
    return f"{normalize_symbol(symbol, quote)}-{quote.upper()}"


def stream_name(symbol: str, quote: str = QUOTE_CURRENCY) -> str:
    """Ticker stream name, ``"BTC" -> "btcusdt@ticker"``."""
    return f"{to_pair(symbol, quote).lower()}@ticker"


def is_quote_pair(pair: str, quote: str = QUOTE_CURRENCY) -> bool:
    return pair.upper().endswith(quote.upper())
