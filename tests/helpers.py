"""Constants and payload builders shared by the tests."""

from typing import Any, Dict

BINANCE_URL = "https://api.binance.test/api/v3"
COINBASE_URL = "https://api.coinbase.test"
SUPABASE_URL = "https://project.supabase.test"
FIXED_TIME = 1_700_000_000.123


def fixed_clock() -> float:
    return FIXED_TIME


def make_ticker(
    symbol: str,
    price: float,
    change: float,
    volume: float = 1000.0,
    quote_volume: float = 50000.0,
) -> Dict[str, Any]:
    """A ``/ticker/24hr`` entry as Binance returns it (numbers as strings)."""
    return {
        "symbol": symbol,
        "lastPrice": str(price),
        "priceChangePercent": str(change),
        "volume": str(volume),
        "quoteVolume": str(quote_volume),
    }


def make_stream_ticker(pair: str, price: float, change: float) -> Dict[str, Any]:
    """A ``<pair>@ticker`` stream event."""
    return {
        "e": "24hrTicker",
        "s": pair,
        "c": str(price),
        "P": str(change),
        "v": "1234.5",
        "q": "98765.4",
    }
