"""
Unit tests for the Binance REST client.
"""

import json
from urllib.parse import parse_qsl, urlsplit

import httpx
import pytest
import respx

from src.coinboard.exchanges.binance import API_KEY_HEADER
from src.coinboard.exchanges.signing import sign
from src.coinboard.shared.errors import RemoteAPIError
from src.coinboard.shared.models import OrderRequest, OrderSide
from tests.helpers import BINANCE_URL, FIXED_TIME, SUPABASE_URL, make_ticker


class TestMarketData:
    """Test public endpoints."""

    @pytest.mark.asyncio
    async def test_ticker_requests_quote_pair(self, binance_client):
        with respx.mock:
            route = respx.get(f"{BINANCE_URL}/ticker/24hr").mock(
                return_value=httpx.Response(200, json=make_ticker("BTCUSDT", 100, 5))
            )

            result = await binance_client.get_ticker_24h("btc")

            assert result["symbol"] == "BTCUSDT"
            assert route.calls.last.request.url.params["symbol"] == "BTCUSDT"

    @pytest.mark.asyncio
    async def test_all_prices(self, binance_client):
        payload = [{"symbol": "BTCUSDT", "price": "100.0"}]
        with respx.mock:
            respx.get(f"{BINANCE_URL}/ticker/price").mock(return_value=httpx.Response(200, json=payload))

            assert await binance_client.get_all_prices() == payload


class TestBalances:
    """Test signed account requests."""

    @pytest.mark.asyncio
    async def test_direct_account_request_is_signed(self, binance_client, binance_credential):
        balances = [{"asset": "BTC", "free": "0.5", "locked": "0.1"}]
        with respx.mock:
            route = respx.get(f"{BINANCE_URL}/account").mock(
                return_value=httpx.Response(200, json={"balances": balances})
            )

            result = await binance_client.get_balances(binance_credential)

            assert result == balances
            request = route.calls.last.request
            assert request.headers[API_KEY_HEADER] == "binance-key"
            timestamp = str(int(FIXED_TIME * 1000))
            assert request.url.params["timestamp"] == timestamp
            assert request.url.params["signature"] == sign(f"timestamp={timestamp}", "binance-secret")

    @pytest.mark.asyncio
    async def test_balances_through_proxy(self, proxied_binance_client, binance_credential):
        with respx.mock:
            route = respx.post(f"{SUPABASE_URL}/functions/v1/binance-proxy").mock(
                return_value=httpx.Response(200, json={"balances": [{"asset": "ETH", "free": "2", "locked": "0"}]})
            )

            result = await proxied_binance_client.get_balances(binance_credential)

            assert result[0]["asset"] == "ETH"
            request = route.calls.last.request
            payload = json.loads(request.content)
            assert payload["endpoint"] == "/api/v3/account"
            assert payload["method"] == "GET"
            assert payload["headers"] == {API_KEY_HEADER: "binance-key"}
            assert payload["params"]["signature"] == sign(
                f"timestamp={payload['params']['timestamp']}", "binance-secret"
            )
            assert request.headers["apikey"] == "anon-key"
            assert request.headers["Authorization"] == "Bearer anon-key"
            # the secret itself never leaves the client
            assert "binance-secret" not in request.content.decode()

    @pytest.mark.asyncio
    async def test_missing_balances_key_returns_empty(self, binance_client, binance_credential):
        with respx.mock:
            respx.get(f"{BINANCE_URL}/account").mock(return_value=httpx.Response(200, json={}))

            assert await binance_client.get_balances(binance_credential) == []

    @pytest.mark.asyncio
    async def test_rejected_key_raises(self, binance_client, binance_credential):
        with respx.mock:
            respx.get(f"{BINANCE_URL}/account").mock(
                return_value=httpx.Response(401, json={"code": -2015, "msg": "Invalid API-key"})
            )

            with pytest.raises(RemoteAPIError) as exc_info:
                await binance_client.get_balances(binance_credential)

            assert exc_info.value.status_code == 401


class TestPlaceOrder:
    """Test signed order submission."""

    @pytest.mark.asyncio
    async def test_limit_order_query(self, binance_client, binance_credential):
        order = OrderRequest(symbol="BTC", side=OrderSide.BUY, quantity=0.5, price=25000)
        with respx.mock:
            route = respx.post(f"{BINANCE_URL}/order").mock(
                return_value=httpx.Response(200, json={"orderId": 12345, "status": "NEW"})
            )

            result = await binance_client.place_order(order, binance_credential)

            assert result["orderId"] == 12345
            request = route.calls.last.request
            assert request.headers[API_KEY_HEADER] == "binance-key"

            query = urlsplit(str(request.url)).query
            params = dict(parse_qsl(query))
            assert params["symbol"] == "BTCUSDT"
            assert params["side"] == "BUY"
            assert params["type"] == "LIMIT"
            assert params["timeInForce"] == "GTC"
            assert params["quantity"] == "0.5"
            assert params["price"] == "25000"
            assert params["timestamp"] == str(int(FIXED_TIME * 1000))

            unsigned, signature = query.rsplit("&signature=", 1)
            assert signature == sign(unsigned, "binance-secret")

    @pytest.mark.asyncio
    async def test_sell_side_is_upper_case(self, binance_client, binance_credential):
        order = OrderRequest(symbol="ETH", side=OrderSide.SELL, quantity=1, price=2000)
        with respx.mock:
            route = respx.post(f"{BINANCE_URL}/order").mock(
                return_value=httpx.Response(200, json={"orderId": 1})
            )

            await binance_client.place_order(order, binance_credential)

            assert route.calls.last.request.url.params["side"] == "SELL"
