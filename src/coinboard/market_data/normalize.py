"""
Normalization of heterogeneous ticker payloads into ``PriceRecord``.
"""

from typing import Any, Dict, Mapping, Optional

from src.coinboard.shared.models import PriceRecord
from src.coinboard.shared.symbols import is_quote_pair, normalize_symbol

EXCHANGE_NAME = "Binance"


def _to_float(value: Any, *, field_name: str) -> float:
    try:
        if value is None or value == "":
            raise ValueError(f"missing value for {field_name}")
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid numeric value for {field_name}: {value!r}") from exc


def _to_float_default(value: Any, default: float = 0.0) -> float:
    try:
        if value is None or value == "":
            return default
        return float(value)
    except (TypeError, ValueError):
        return default


def approximate_change_1h(change_24h: float) -> float:
    # Not a real 1h window: the 24h change spread evenly over 24 hours.
    return change_24h / 24


def from_rest_ticker(
    data: Mapping[str, Any],
    *,
    rank: int = 0,
    fallback_price: Optional[float] = None,
) -> PriceRecord:
    """Build a record from a ``/ticker/24hr`` entry."""
    pair = data.get("symbol")
    if not pair:
        raise ValueError("missing symbol in ticker")

    price_raw = data.get("lastPrice")
    if (price_raw is None or price_raw == "") and fallback_price is not None:
        price = fallback_price
    else:
        price = _to_float(price_raw, field_name="lastPrice")

    change_24h = _to_float(data.get("priceChangePercent"), field_name="priceChangePercent")

    return PriceRecord(
        symbol=normalize_symbol(str(pair)),
        price=price,
        change_24h=change_24h,
        volume_24h=_to_float_default(data.get("volume")),
        exchange=EXCHANGE_NAME,
        market_cap=_to_float_default(data.get("quoteVolume")),
        rank=rank,
        price_change_1h=approximate_change_1h(change_24h),
    )


def from_stream_ticker(payload: Mapping[str, Any]) -> PriceRecord:
    """Build a record from a ``<pair>@ticker`` stream event.

    Combined-stream envelopes (``{"stream": ..., "data": {...}}``) are
    unwrapped first.
    """
    data: Mapping[str, Any] = payload
    nested = payload.get("data")
    if isinstance(nested, dict):
        data = nested

    pair = data.get("s")
    if not pair:
        raise ValueError("missing symbol in stream event")

    change_24h = _to_float(data.get("P"), field_name="P")

    return PriceRecord(
        symbol=normalize_symbol(str(pair)),
        price=_to_float(data.get("c"), field_name="c"),
        change_24h=change_24h,
        volume_24h=_to_float_default(data.get("v")),
        exchange=EXCHANGE_NAME,
        market_cap=_to_float_default(data.get("q")),
        rank=0,
        price_change_1h=approximate_change_1h(change_24h),
    )


def price_table(entries: Any) -> Dict[str, float]:
    """``/ticker/price`` list to ``{normalized symbol: price}``.

    Only quote-currency pairs are kept so ``BTCUSDT`` is not shadowed by
    ``BTCEUR`` after normalization.
    """
    if not isinstance(entries, list):
        raise ValueError("price list must be an array")

    prices: Dict[str, float] = {}
    for item in entries:
        pair = str(item.get("symbol", ""))
        if not is_quote_pair(pair):
            continue
        prices[normalize_symbol(pair)] = _to_float_default(item.get("price"))
    return prices
