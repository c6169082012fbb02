"""Market data fetching, normalization and the shared price table."""

from .fetcher import MarketDataFetcher
from .service import MarketDataService, PriceTable

__all__ = ["MarketDataFetcher", "MarketDataService", "PriceTable"]
