"""
Market data fetcher: merges Binance REST responses into ``PriceRecord`` lists.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from src.coinboard.config import MarketSettings, settings
from src.coinboard.exchanges.binance import BinanceClient
from src.coinboard.logging import get_logger
from src.coinboard.shared.errors import (
    CoinboardError,
    DataUnavailableError,
    RemoteAPIError,
    RequestTimeoutError,
)
from src.coinboard.shared.models import PriceRecord
from src.coinboard.shared.symbols import is_quote_pair, normalize_symbol
from .normalize import from_rest_ticker, price_table

logger = get_logger(__name__)


def _reason(error: CoinboardError) -> str:
    if isinstance(error, RequestTimeoutError):
        return "timeout"
    if isinstance(error, RemoteAPIError):
        return "remote"
    return "network"


class MarketDataFetcher:
    """Fetches watched prices, market movers and losers.

    Every call is all-or-nothing: any failed request or unparsable payload
    raises ``DataUnavailableError`` and no partial list is returned.
    """

    def __init__(self, client: BinanceClient, config: Optional[MarketSettings] = None):
        self.client = client
        self.config = config or settings.market

    async def _guarded(self, what: str, call: Callable[[], Awaitable[Any]]) -> Any:
        try:
            return await call()
        except CoinboardError as e:
            reason = _reason(e)
            logger.error(f"Failed to fetch {what}: {e}")
            raise DataUnavailableError(f"Failed to fetch {what}", reason, "binance") from e
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Failed to parse {what}: {e}")
            raise DataUnavailableError(f"Failed to parse {what}", "parse", "binance") from e

    async def get_prices(self, symbols: Optional[Sequence[str]] = None) -> List[PriceRecord]:
        """Price records for ``symbols`` (watched coins by default), in input order."""
        if symbols is None:
            symbols = self.config.watched_coins
        symbols = [normalize_symbol(s) for s in symbols]
        if not symbols:
            return []

        async def fetch():
            return await asyncio.gather(
                asyncio.gather(*(self.client.get_ticker_24h(symbol) for symbol in symbols)),
                self.client.get_all_prices(),
            )

        tickers, all_prices = await self._guarded("cryptocurrency prices", fetch)

        async def merge():
            prices = price_table(all_prices)
            records = []
            for index, (symbol, ticker) in enumerate(zip(symbols, tickers)):
                record = from_rest_ticker(ticker, rank=index + 1, fallback_price=prices.get(symbol))
                if record.symbol != symbol:
                    raise ValueError(f"ticker for {record.symbol} returned when {symbol} was requested")
                records.append(record)
            return records

        records = await self._guarded("cryptocurrency prices", merge)
        logger.debug(f"Fetched {len(records)} prices")
        return records

    async def _all_quote_tickers(self, what: str) -> List[PriceRecord]:
        tickers = await self._guarded(what, self.client.get_all_tickers)

        async def normalize():
            if not isinstance(tickers, list):
                raise ValueError("ticker list must be an array")
            return [
                from_rest_ticker(item)
                for item in tickers
                if is_quote_pair(str(item.get("symbol", "")))
            ]

        return await self._guarded(what, normalize)

    async def get_market_movers(self) -> List[PriceRecord]:
        """Top pairs by absolute 24h change, largest first."""
        records = await self._all_quote_tickers("market movers")
        records.sort(key=lambda r: abs(r.change_24h), reverse=True)
        return records[: self.config.movers_limit]

    async def get_losers(self) -> List[PriceRecord]:
        """Pairs with a negative 24h change, most negative first."""
        records = await self._all_quote_tickers("top losers")
        losers = [r for r in records if r.change_24h < 0]
        losers.sort(key=lambda r: r.change_24h)
        return losers[: self.config.losers_limit]
