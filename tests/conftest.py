"""Shared pytest fixtures and configuration."""

from typing import AsyncGenerator

import pytest

from src.coinboard.config import BinanceSettings, CoinbaseSettings, MarketSettings, SupabaseSettings
from src.coinboard.exchanges.binance import BinanceClient
from src.coinboard.exchanges.coinbase import CoinbaseClient
from src.coinboard.exchanges.proxy import BalanceProxyClient
from src.coinboard.market_data.fetcher import MarketDataFetcher
from src.coinboard.shared.models import Credential, ExchangeCredentials
from tests.helpers import BINANCE_URL, COINBASE_URL, SUPABASE_URL, fixed_clock


@pytest.fixture
def market_settings() -> MarketSettings:
    return MarketSettings(watched_coins=["BTC", "ETH"], request_timeout=1.0)


@pytest.fixture
def supabase_settings() -> SupabaseSettings:
    return SupabaseSettings(url=SUPABASE_URL, anon_key="anon-key")


@pytest.fixture
async def binance_client() -> AsyncGenerator[BinanceClient, None]:
    client = BinanceClient(BinanceSettings(rest_url=BINANCE_URL), clock=fixed_clock)
    yield client
    await client.close()


@pytest.fixture
async def proxied_binance_client(supabase_settings) -> AsyncGenerator[BinanceClient, None]:
    proxy = BalanceProxyClient(supabase_settings)
    client = BinanceClient(BinanceSettings(rest_url=BINANCE_URL), proxy=proxy, clock=fixed_clock)
    yield client
    await client.close()
    await proxy.close()


@pytest.fixture
async def coinbase_client() -> AsyncGenerator[CoinbaseClient, None]:
    client = CoinbaseClient(CoinbaseSettings(rest_url=COINBASE_URL), clock=fixed_clock)
    yield client
    await client.close()


@pytest.fixture
def fetcher(binance_client, market_settings) -> MarketDataFetcher:
    return MarketDataFetcher(binance_client, market_settings)


@pytest.fixture
def binance_credential() -> Credential:
    return Credential(apiKey="binance-key", secretKey="binance-secret")


@pytest.fixture
def coinbase_credential() -> Credential:
    return Credential(apiKey="coinbase-key", secretKey="coinbase-secret")


@pytest.fixture
def both_credentials(binance_credential, coinbase_credential) -> ExchangeCredentials:
    return ExchangeCredentials(binance=binance_credential, coinbase=coinbase_credential)
