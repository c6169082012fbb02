"""Unit tests for the error hierarchy."""

import pytest

from src.coinboard.shared.errors import (
    AuthenticationRequiredError,
    CoinboardError,
    DataUnavailableError,
    ErrorHandler,
    MissingCredentialsError,
    NetworkError,
    RemoteAPIError,
    RequestTimeoutError,
    UnsupportedExchangeError,
)


def test_timeout_is_a_network_error():
    error = RequestTimeoutError("https://api.example.test/x", 5.0, "binance")

    assert isinstance(error, NetworkError)
    assert isinstance(error, CoinboardError)
    assert "5s" in str(error)
    assert error.exchange == "binance"


def test_remote_error_fields():
    error = RemoteAPIError(400, "Invalid symbol.", "binance")

    assert error.status_code == 400
    assert error.remote_message == "Invalid symbol."
    assert "400" in str(error)


@pytest.mark.parametrize("error,expected", [
    (AuthenticationRequiredError(), "Please sign in to continue"),
    (MissingCredentialsError("coinbase"), "Add your coinbase API keys in settings first"),
    (UnsupportedExchangeError("kraken"), "kraken is not supported"),
    (DataUnavailableError("Failed", "timeout"), "Market data timed out, try again"),
    (DataUnavailableError("Failed", "parse"), "Market data is unavailable right now"),
    (RequestTimeoutError("u", 1.0), "The exchange did not respond in time"),
    (NetworkError("down"), "Could not reach the exchange"),
    (RemoteAPIError(400, "Insufficient funds"), "Exchange rejected the request: Insufficient funds"),
    (CoinboardError("other"), "Something went wrong"),
])
def test_user_message(error, expected):
    assert ErrorHandler.user_message(error) == expected
