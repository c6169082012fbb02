"""
Portfolio valuation across exchanges and single-shot trade submission.
"""

from typing import Dict, List, Optional, Protocol, Tuple

from src.coinboard.config import MarketSettings, settings
from src.coinboard.exchanges.binance import BinanceClient
from src.coinboard.exchanges.coinbase import CoinbaseClient
from src.coinboard.logging import get_logger
from src.coinboard.market_data.fetcher import MarketDataFetcher
from src.coinboard.shared.errors import MissingCredentialsError, UnsupportedExchangeError
from src.coinboard.shared.models import (
    Credential,
    Exchange,
    ExchangeCredentials,
    OrderRequest,
    PortfolioAsset,
    PortfolioSnapshot,
)
from src.coinboard.shared.symbols import normalize_symbol

logger = get_logger(__name__)


class CredentialSource(Protocol):
    async def get_api_keys(self) -> ExchangeCredentials: ...


def _to_float(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


class PortfolioAggregator:
    """Combines balances from every configured exchange into one snapshot.

    Credentials are loaded from ``credentials`` on every call and dropped
    when the call returns. An exchange without credentials is skipped.
    """

    def __init__(
        self,
        credentials: CredentialSource,
        fetcher: MarketDataFetcher,
        binance: BinanceClient,
        coinbase: CoinbaseClient,
        config: Optional[MarketSettings] = None,
    ):
        self.credentials = credentials
        self.fetcher = fetcher
        self.binance = binance
        self.coinbase = coinbase
        self.config = config or settings.market

    async def _binance_balances(self, credential: Credential) -> List[Tuple[str, float]]:
        balances = []
        for item in await self.binance.get_balances(credential):
            total = _to_float(item.get("free")) + _to_float(item.get("locked"))
            if total > 0:
                balances.append((normalize_symbol(str(item.get("asset", ""))), total))
        return balances

    async def _coinbase_balances(self, credential: Credential) -> List[Tuple[str, float]]:
        balances = []
        for account in await self.coinbase.get_accounts(credential):
            amount = _to_float(account.get("balance"))
            if amount > 0:
                balances.append((normalize_symbol(str(account.get("currency", ""))), amount))
        return balances

    async def get_portfolio(self) -> PortfolioSnapshot:
        api_keys = await self.credentials.get_api_keys()
        configured = api_keys.configured
        if not configured:
            logger.info("No exchange credentials configured, returning empty portfolio")
            return PortfolioSnapshot()

        prices = await self.fetcher.get_prices(self.config.watched_coins)
        price_map = {record.symbol: record.price for record in prices}

        fetchers = {
            Exchange.BINANCE: self._binance_balances,
            Exchange.COINBASE: self._coinbase_balances,
        }

        assets: Dict[str, PortfolioAsset] = {}
        for exchange in Exchange:
            credential = api_keys.for_exchange(exchange)
            if credential is None:
                logger.debug(f"Skipping {exchange.value}: no credentials")
                continue

            balances = await fetchers[exchange](credential)
            logger.info(f"Fetched {len(balances)} non-zero balances from {exchange.value}")

            for symbol, amount in balances:
                value = amount * price_map.get(symbol, 0.0)
                existing = assets.get(symbol)
                if existing is None:
                    assets[symbol] = PortfolioAsset(symbol=symbol, balance=amount, value_usd=value)
                else:
                    existing.balance += amount
                    existing.value_usd += value

        ordered = sorted(assets.values(), key=lambda a: a.value_usd, reverse=True)
        total = sum(asset.value_usd for asset in ordered)
        return PortfolioSnapshot(assets=ordered, total_value_usd=total)

    def resolve_exchange(self, order: OrderRequest) -> Exchange:
        name = (order.exchange or self.config.default_exchange).lower()
        try:
            return Exchange(name)
        except ValueError:
            raise UnsupportedExchangeError(name) from None

    async def execute_trade(self, order: OrderRequest) -> bool:
        """Submit ``order`` once; True when the exchange returned an order id."""
        exchange = self.resolve_exchange(order)
        api_keys = await self.credentials.get_api_keys()
        credential = api_keys.for_exchange(exchange)
        if credential is None:
            raise MissingCredentialsError(exchange.value)

        logger.info(
            f"Submitting {order.side.value} {order.quantity} {order.symbol} "
            f"@ {order.price} on {exchange.value}"
        )
        if exchange is Exchange.BINANCE:
            result = await self.binance.place_order(order, credential)
            accepted = result.get("orderId") is not None
        else:
            result = await self.coinbase.place_order(order, credential)
            accepted = result.get("id") is not None

        if accepted:
            logger.info(f"Order accepted by {exchange.value}")
        else:
            logger.warning(f"{exchange.value} returned no order id")
        return accepted
