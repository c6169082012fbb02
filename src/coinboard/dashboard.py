"""Dashboard service: wires the components together and owns their lifecycle."""

import asyncio
from collections import deque
from typing import Any, Awaitable, Deque, List, Optional, Sequence

from src.coinboard.auth.supabase import ProfileStore, Session, SupabaseAuthClient
from src.coinboard.config import Settings, settings
from src.coinboard.exchanges.binance import BinanceClient
from src.coinboard.exchanges.coinbase import CoinbaseClient
from src.coinboard.exchanges.proxy import BalanceProxyClient
from src.coinboard.health import HealthChecker, price_freshness_check, price_stream_check
from src.coinboard.logging import get_logger, trace_context
from src.coinboard.market_data.fetcher import MarketDataFetcher
from src.coinboard.market_data.service import MarketDataService, PriceTable
from src.coinboard.metrics import MetricsCollector
from src.coinboard.portfolio.aggregator import PortfolioAggregator
from src.coinboard.shared.errors import CoinboardError, ErrorHandler
from src.coinboard.shared.models import (
    Credential,
    Exchange,
    ExchangeCredentials,
    Notification,
    NotificationLevel,
    OrderRequest,
    PortfolioSnapshot,
    PriceRecord,
)
from src.coinboard.stream.client import ConnectFactory, PriceStreamClient
from src.coinboard.stream.event_bus import EventBus, Topic

logger = get_logger(__name__)


class DashboardService:
    """Composition root for one dashboard session."""

    def __init__(
        self,
        config: Optional[Settings] = None,
        *,
        auth: Optional[SupabaseAuthClient] = None,
        binance: Optional[BinanceClient] = None,
        coinbase: Optional[CoinbaseClient] = None,
        stream_connect: Optional[ConnectFactory] = None,
    ) -> None:
        self.config = config or settings
        self.is_running = False

        self.bus = EventBus()
        self.auth = auth or SupabaseAuthClient(self.config.supabase)
        self.profiles = ProfileStore(self.auth)

        self.proxy: Optional[BalanceProxyClient] = None
        if binance is None and self.config.binance.use_balance_proxy:
            self.proxy = BalanceProxyClient(self.config.supabase)
        self.binance = binance or BinanceClient(self.config.binance, proxy=self.proxy)
        self.coinbase = coinbase or CoinbaseClient(self.config.coinbase)

        self.fetcher = MarketDataFetcher(self.binance, self.config.market)
        self.aggregator = PortfolioAggregator(
            self.profiles, self.fetcher, self.binance, self.coinbase, self.config.market
        )
        self.price_table = PriceTable()
        self.market_service = MarketDataService(self.fetcher, self.price_table, self.config.market)
        self.stream = PriceStreamClient(
            self.bus,
            symbols=self.config.market.watched_coins,
            config=self.config.stream,
            binance=self.config.binance,
            connect=stream_connect,
        )

        self.metrics = MetricsCollector()
        self.notifications: Deque[Notification] = deque(maxlen=50)
        self.bus.subscribe(Topic.PRICE, self.price_table.apply)
        self.bus.subscribe(Topic.NOTIFICATION, self.notifications.append)

        self.health = HealthChecker(self.config.service_name)
        self.health.register_check("price_stream", lambda: price_stream_check(self.stream))
        self.health.register_check(
            "price_table",
            lambda: price_freshness_check(self.price_table, self.config.market.stale_after),
        )

        self._tasks: List[asyncio.Task] = []

    async def start(self) -> None:
        """Start the live stream and the refresh loop."""
        logger.info("Starting dashboard service...")
        self.is_running = True
        self._tasks = [
            asyncio.create_task(self.stream.start()),
            asyncio.create_task(self.market_service.start()),
        ]

    async def stop(self) -> None:
        """Stop background tasks and close every client."""
        logger.info("Stopping dashboard service...")
        self.is_running = False

        await self.stream.stop()
        await self.market_service.stop()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        await self.binance.close()
        await self.coinbase.close()
        if self.proxy is not None:
            await self.proxy.close()
        await self.auth.close()

    def notify(self, level: NotificationLevel, message: str) -> None:
        self.bus.publish(Topic.NOTIFICATION, Notification(level=level, message=message))

    async def _boundary(self, operation: str, failure: str, call: Awaitable[Any]) -> Any:
        """Await ``call``; on a dashboard error log it, notify the user and re-raise."""
        with trace_context():
            try:
                return await call
            except CoinboardError as e:
                logger.error(f"{failure}: {e}")
                self.metrics.record_error(operation)
                self.notify(NotificationLevel.ERROR, ErrorHandler.user_message(e))
                raise

    # Market data

    async def load_prices(self, symbols: Optional[Sequence[str]] = None) -> List[PriceRecord]:
        records = await self._boundary(
            "prices", "Failed to fetch cryptocurrency prices", self.fetcher.get_prices(symbols)
        )
        self.price_table.apply_many(records)
        return records

    async def load_movers(self) -> List[PriceRecord]:
        return await self._boundary(
            "movers", "Failed to fetch market movers", self.fetcher.get_market_movers()
        )

    async def load_losers(self) -> List[PriceRecord]:
        return await self._boundary(
            "losers", "Failed to fetch top losers", self.fetcher.get_losers()
        )

    # Portfolio and trading

    async def load_portfolio(self) -> PortfolioSnapshot:
        snapshot = await self._boundary(
            "portfolio", "Failed to load portfolio data", self.aggregator.get_portfolio()
        )
        self.metrics.record_portfolio(snapshot.total_value_usd)
        return snapshot

    async def submit_trade(self, order: OrderRequest) -> bool:
        accepted = await self._boundary(
            "trade", "Trade execution failed", self.aggregator.execute_trade(order)
        )
        if accepted:
            self.notify(NotificationLevel.INFO, f"{order.side.value.title()} order for {order.symbol} submitted")
        return accepted

    # Account

    async def sign_up(self, email: str, password: str) -> Optional[Session]:
        return await self._boundary("auth", "Sign-up failed", self.auth.sign_up(email, password))

    async def sign_in(self, email: str, password: str) -> Session:
        return await self._boundary(
            "auth", "Sign-in failed", self.auth.sign_in_with_password(email, password)
        )

    async def sign_out(self) -> None:
        await self._boundary("auth", "Sign-out failed", self.auth.sign_out())
        self.notify(NotificationLevel.INFO, "Logged out successfully")

    async def save_api_keys(self, exchange: Exchange, credential: Credential) -> ExchangeCredentials:
        saved = await self._boundary(
            "api_keys",
            f"Failed to save {exchange.value} API keys",
            self.profiles.save_api_keys(exchange, credential),
        )
        self.notify(NotificationLevel.INFO, f"{exchange.value.title()} API keys saved successfully")
        return saved
