"""Portfolio aggregation and trade submission."""

from .aggregator import PortfolioAggregator

__all__ = ["PortfolioAggregator"]
