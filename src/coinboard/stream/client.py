"""
Binance ticker stream client with linear reconnect backoff.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, List, Optional, Sequence

import websockets
from websockets.exceptions import ConnectionClosed

from src.coinboard.config import BinanceSettings, StreamSettings, settings
from src.coinboard.logging import get_logger
from src.coinboard.market_data.normalize import from_stream_ticker
from src.coinboard.metrics import stream_connected, stream_messages_total, stream_reconnects_total
from src.coinboard.shared.models import PriceRecord
from src.coinboard.shared.symbols import stream_name
from .event_bus import EventBus, Topic

logger = get_logger(__name__)

ConnectFactory = Callable[[str], Any]
Sleep = Callable[[float], Awaitable[None]]


class PriceStreamClient:
    """Single multiplexed ticker stream for the watched symbols.

    Every inbound ticker is normalized into a ``PriceRecord`` and published
    on ``Topic.PRICE``. When the connection drops, reconnect attempt ``n``
    waits ``reconnect_base_delay * n`` seconds; a successful open resets the
    counter. After ``max_reconnect_attempts`` failed attempts the client
    stops without publishing anything, so subscribers only notice through
    the absence of updates.
    """

    def __init__(
        self,
        bus: EventBus,
        symbols: Optional[Sequence[str]] = None,
        config: Optional[StreamSettings] = None,
        binance: Optional[BinanceSettings] = None,
        connect: Optional[ConnectFactory] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.bus = bus
        self.symbols: List[str] = list(symbols or settings.market.watched_coins)
        self.config = config or settings.stream
        self.binance = binance or settings.binance
        self._connect = connect or websockets.connect
        self._sleep = sleep

        self.ws: Optional[Any] = None
        self.is_running = False
        self.is_connected = False
        self.reconnect_attempts = 0
        self.connection_attempts = 0
        self.messages_received = 0

    @property
    def url(self) -> str:
        streams = "/".join(stream_name(symbol) for symbol in self.symbols)
        return f"{self.binance.ws_url.rstrip('/')}/{streams}"

    def handle_message(self, raw: Any) -> Optional[PriceRecord]:
        """Normalize one raw message and publish it; malformed input is skipped."""
        if not self.is_running:
            return None
        try:
            data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
            if not isinstance(data, dict):
                raise ValueError("message must be a JSON object")
            record = from_stream_ticker(data)
        except (json.JSONDecodeError, ValueError) as e:
            stream_messages_total.labels(status="skipped").inc()
            logger.warning(f"Skipping stream message: {e}")
            return None

        self.messages_received += 1
        stream_messages_total.labels(status="published").inc()
        self.bus.publish(Topic.PRICE, record)
        return record

    async def _consume(self, ws: Any) -> None:
        async for message in ws:
            if not self.is_running:
                break
            self.handle_message(message)

    async def _connect_once(self) -> None:
        self.connection_attempts += 1
        logger.info(f"Connecting to price stream: {self.url}")

        async with self._connect(self.url) as ws:
            self.ws = ws
            self.is_connected = True
            self.reconnect_attempts = 0
            stream_connected.set(1)
            logger.info(f"Price stream connected for {len(self.symbols)} symbols")
            try:
                await self._consume(ws)
            finally:
                self.ws = None
                self.is_connected = False
                stream_connected.set(0)

    async def start(self) -> None:
        """Connect and keep reconnecting until stopped or out of attempts."""
        if not self.symbols:
            logger.warning("No symbols to stream, price stream not started")
            return

        self.is_running = True
        self.reconnect_attempts = 0

        while self.is_running:
            try:
                await self._connect_once()
                logger.info("Price stream disconnected")
            except ConnectionClosed as e:
                logger.warning(f"Price stream connection closed: {e}")
            except Exception as e:
                logger.error(f"Price stream error: {e}")

            if not self.is_running:
                break

            if self.reconnect_attempts >= self.config.max_reconnect_attempts:
                logger.warning(
                    f"Price stream gave up after {self.reconnect_attempts} reconnect attempts"
                )
                self.is_running = False
                break

            self.reconnect_attempts += 1
            stream_reconnects_total.inc()
            delay = self.config.reconnect_base_delay * self.reconnect_attempts
            logger.info(
                f"Reconnecting price stream in {delay:g}s "
                f"(attempt {self.reconnect_attempts}/{self.config.max_reconnect_attempts})"
            )
            await self._sleep(delay)

    async def stop(self) -> None:
        """Close the connection; no events are delivered after this returns."""
        logger.info("Stopping price stream...")
        self.is_running = False
        ws = self.ws
        if ws is not None:
            await ws.close()
        self.ws = None
