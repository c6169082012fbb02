"""
Unit tests for request signing.
"""

import hashlib
import hmac
import json
from urllib.parse import parse_qsl

import pytest

from src.coinboard.exchanges.signing import (
    BinanceSigner,
    CoinbaseSigner,
    format_number,
    mask_secret,
    sign,
)
from tests.helpers import FIXED_TIME, fixed_clock


class TestSign:
    """Test the HMAC primitive."""

    def test_matches_hmac_sha256_hex(self):
        expected = hmac.new(b"secret", b"payload", hashlib.sha256).hexdigest()
        assert sign("payload", "secret") == expected

    def test_is_deterministic(self):
        assert sign("symbol=BTCUSDT&timestamp=1", "s3cr3t") == sign("symbol=BTCUSDT&timestamp=1", "s3cr3t")

    def test_one_character_change_changes_signature(self):
        assert sign("symbol=BTCUSDT&timestamp=1", "s3cr3t") != sign("symbol=BTCUSDT&timestamp=2", "s3cr3t")

    def test_secret_change_changes_signature(self):
        assert sign("payload", "secret-a") != sign("payload", "secret-b")

    def test_hex_digest_shape(self):
        signature = sign("payload", "secret")
        assert len(signature) == 64
        int(signature, 16)

    def test_known_vector(self):
        # Binance API documentation example
        query = (
            "symbol=LTCBTC&side=BUY&type=LIMIT&timeInForce=GTC&quantity=1"
            "&price=0.1&recvWindow=5000&timestamp=1499827319559"
        )
        secret = "NhqPtmdSJYdKjVHjA7PZj4Mge3R5YNiP1e3UZjInClVN65XAbvqqM6A7H5fATj0j"
        assert sign(query, secret) == "c8db56825ae71d6d79447849e617115f4a920fa2acdcab2b053c4b2838bd6b71"


class TestFormatNumber:
    """Numbers must render without float noise."""

    @pytest.mark.parametrize("value,expected", [
        (1.0, "1"),
        (0.5, "0.5"),
        (100, "100"),
        (0.00000001, "0.00000001"),
        (25000.25, "25000.25"),
        ("LIMIT", "LIMIT"),
    ])
    def test_format(self, value, expected):
        assert format_number(value) == expected


class TestBinanceSigner:
    """Test Binance query signing."""

    def test_timestamp_is_milliseconds(self):
        signer = BinanceSigner("secret", clock=fixed_clock)
        assert signer.timestamp() == int(FIXED_TIME * 1000)

    def test_signature_covers_params_in_insertion_order(self):
        signer = BinanceSigner("secret", clock=fixed_clock)
        params = signer.signed_params({"symbol": "BTCUSDT", "side": "BUY", "quantity": 1.0})

        assert list(params) == ["symbol", "side", "quantity", "timestamp", "signature"]
        assert params["quantity"] == "1"
        expected_payload = f"symbol=BTCUSDT&side=BUY&quantity=1&timestamp={int(FIXED_TIME * 1000)}"
        assert params["signature"] == sign(expected_payload, "secret")

    def test_signed_query_appends_signature_last(self):
        signer = BinanceSigner("secret", clock=fixed_clock)
        query = signer.signed_query({"symbol": "ETHUSDT"})

        pairs = parse_qsl(query)
        assert pairs[-1][0] == "signature"
        unsigned = query.rsplit("&signature=", 1)[0]
        assert sign(unsigned, "secret") == pairs[-1][1]

    def test_explicit_timestamp_is_kept(self):
        signer = BinanceSigner("secret", clock=fixed_clock)
        params = signer.signed_params({"timestamp": 42})
        assert params["timestamp"] == "42"

    def test_account_request_signs_timestamp_only(self):
        signer = BinanceSigner("secret", clock=fixed_clock)
        params = signer.signed_params()
        assert params["signature"] == sign(f"timestamp={int(FIXED_TIME * 1000)}", "secret")


class TestCoinbaseSigner:
    """Test Coinbase header signing."""

    def test_timestamp_is_whole_seconds(self):
        signer = CoinbaseSigner("key", "secret", clock=fixed_clock)
        assert signer.timestamp() == int(FIXED_TIME)

    def test_prehash_concatenation(self):
        assert CoinbaseSigner.prehash(1700000000, "get", "/accounts") == "1700000000GET/accounts"
        assert CoinbaseSigner.prehash(1, "POST", "/orders", '{"a":1}') == '1POST/orders{"a":1}'

    def test_headers_for_get(self):
        signer = CoinbaseSigner("key", "secret", clock=fixed_clock)
        headers = signer.headers("GET", "/accounts")

        assert headers["CB-ACCESS-KEY"] == "key"
        assert headers["CB-ACCESS-TIMESTAMP"] == str(int(FIXED_TIME))
        assert headers["CB-ACCESS-SIGN"] == sign(f"{int(FIXED_TIME)}GET/accounts", "secret")
        assert "Content-Type" not in headers

    def test_headers_for_post_sign_exact_body(self):
        signer = CoinbaseSigner("key", "secret", clock=fixed_clock)
        body = CoinbaseSigner.encode_body({"product_id": "BTC-USDT", "side": "buy"})
        headers = signer.headers("POST", "/orders", body)

        assert body == '{"product_id":"BTC-USDT","side":"buy"}'
        assert headers["CB-ACCESS-SIGN"] == sign(f"{int(FIXED_TIME)}POST/orders{body}", "secret")
        assert headers["Content-Type"] == "application/json"
        assert json.loads(body)["side"] == "buy"


def test_mask_secret():
    assert mask_secret("abcdefghijkl") == "abcd********"
    assert mask_secret("abc") == "***"
    assert mask_secret(None) == "<unset>"
