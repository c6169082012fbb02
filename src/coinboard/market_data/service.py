"""
Price table shared by the refresh loop and the live stream, and the loop
that keeps it refreshed.
"""

import asyncio
from datetime import datetime
from typing import Callable, Dict, List, Optional, Awaitable

from src.coinboard.config import MarketSettings, settings
from src.coinboard.logging import get_logger, trace_context
from src.coinboard.metrics import price_table_symbols
from src.coinboard.shared.errors import CoinboardError
from src.coinboard.shared.models import PriceRecord
from .fetcher import MarketDataFetcher

logger = get_logger(__name__)


class PriceTable:
    """Latest ``PriceRecord`` per symbol; the last write wins."""

    def __init__(self):
        self._records: Dict[str, PriceRecord] = {}
        self.last_update: Optional[datetime] = None

    def apply(self, record: PriceRecord) -> None:
        self._records[record.symbol] = record
        self.last_update = datetime.utcnow()
        price_table_symbols.set(len(self._records))

    def apply_many(self, records: List[PriceRecord]) -> None:
        for record in records:
            self.apply(record)

    def get(self, symbol: str) -> Optional[PriceRecord]:
        return self._records.get(symbol)

    def snapshot(self) -> List[PriceRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def seconds_since_update(self) -> Optional[float]:
        if self.last_update is None:
            return None
        return (datetime.utcnow() - self.last_update).total_seconds()


class MarketDataService:
    """Polls watched prices on a timer and writes them into the price table."""

    def __init__(
        self,
        fetcher: MarketDataFetcher,
        table: PriceTable,
        config: Optional[MarketSettings] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.fetcher = fetcher
        self.table = table
        self.config = config or settings.market
        self.running = False
        self._sleep = sleep
        self.stats = {
            "refreshes": 0,
            "failures": 0,
            "last_refresh": None,
            "last_error": None,
        }

    async def refresh_once(self) -> List[PriceRecord]:
        """Fetch watched prices once and apply them. Errors propagate."""
        records = await self.fetcher.get_prices(self.config.watched_coins)
        self.table.apply_many(records)
        self.stats["refreshes"] += 1
        self.stats["last_refresh"] = datetime.utcnow()
        return records

    async def start(self):
        """Run the refresh loop until ``stop`` is called."""
        logger.info(f"Starting price refresh loop every {self.config.refresh_interval}s")
        self.running = True

        while self.running:
            with trace_context():
                try:
                    records = await self.refresh_once()
                    logger.debug(f"Refreshed {len(records)} prices")
                except CoinboardError as e:
                    self.stats["failures"] += 1
                    self.stats["last_error"] = str(e)
                    logger.warning(f"Price refresh failed: {e}")

            if not self.running:
                break
            await self._sleep(self.config.refresh_interval)

    async def stop(self):
        logger.info("Stopping price refresh loop...")
        self.running = False
