"""
Unit tests for the price table and the refresh loop.
"""

from unittest.mock import AsyncMock, Mock

import pytest
from prometheus_client import REGISTRY

from src.coinboard.config import MarketSettings
from src.coinboard.market_data.service import MarketDataService, PriceTable
from src.coinboard.metrics import MetricsCollector
from src.coinboard.shared.errors import DataUnavailableError
from src.coinboard.shared.models import PriceRecord


def record(symbol, price, change=0.0):
    return PriceRecord(symbol=symbol, price=price, change_24h=change, volume_24h=1.0)


class TestPriceTable:
    """Test last-write-wins price storage."""

    def test_empty_table(self):
        table = PriceTable()

        assert len(table) == 0
        assert table.get("BTC") is None
        assert table.seconds_since_update() is None

    def test_last_write_wins(self):
        table = PriceTable()
        table.apply(record("BTC", 100))
        table.apply(record("BTC", 101))

        assert len(table) == 1
        assert table.get("BTC").price == 101

    def test_apply_many_and_snapshot(self):
        table = PriceTable()
        table.apply_many([record("BTC", 100), record("ETH", 50)])

        assert [r.symbol for r in table.snapshot()] == ["BTC", "ETH"]
        assert table.seconds_since_update() >= 0


class TestMarketDataService:
    """Test the periodic refresh loop."""

    @pytest.fixture
    def config(self):
        return MarketSettings(watched_coins=["BTC", "ETH"], refresh_interval=30)

    @pytest.mark.asyncio
    async def test_refresh_once_applies_records(self, config):
        fetcher = Mock()
        fetcher.get_prices = AsyncMock(return_value=[record("BTC", 100), record("ETH", 50)])
        table = PriceTable()
        service = MarketDataService(fetcher, table, config)

        records = await service.refresh_once()

        assert len(records) == 2
        assert table.get("ETH").price == 50
        assert service.stats["refreshes"] == 1
        fetcher.get_prices.assert_awaited_once_with(["BTC", "ETH"])

    @pytest.mark.asyncio
    async def test_loop_survives_failures_and_sleeps_interval(self, config):
        fetcher = Mock()
        fetcher.get_prices = AsyncMock(side_effect=[
            DataUnavailableError("Failed to fetch cryptocurrency prices", "timeout"),
            [record("BTC", 100)],
        ])
        table = PriceTable()
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)
            if len(delays) == 2:
                await service.stop()

        service = MarketDataService(fetcher, table, config, sleep=fake_sleep)
        await service.start()

        assert delays == [30, 30]
        assert service.stats["failures"] == 1
        assert service.stats["refreshes"] == 1
        assert "Failed to fetch" in service.stats["last_error"]
        assert table.get("BTC").price == 100
        assert not service.running


def test_table_size_gauge_follows_applies():
    """Test the price table gauge is kept by the table itself."""
    table = PriceTable()
    table.apply_many([record("BTC", 100), record("ETH", 50), record("BTC", 101)])

    assert REGISTRY.get_sample_value("coinboard_price_table_symbols") == 2
    assert not hasattr(MetricsCollector, "record_price_table")
