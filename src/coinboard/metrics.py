"""
Prometheus metrics for the dashboard backend.
"""

from prometheus_client import Counter, Gauge, Histogram, Info

# Service info
service_info = Info(
    'coinboard_info',
    'Dashboard backend information'
)

# REST metrics
rest_requests_total = Counter(
    'coinboard_rest_requests_total',
    'Total exchange REST requests',
    ['exchange', 'outcome']  # ok, remote_error, timeout, network_error
)

rest_request_duration = Histogram(
    'coinboard_rest_request_seconds',
    'Exchange REST request duration',
    ['exchange'],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)
)

# Stream metrics
stream_messages_total = Counter(
    'coinboard_stream_messages_total',
    'Total price stream messages',
    ['status']  # published, skipped
)

stream_reconnects_total = Counter(
    'coinboard_stream_reconnects_total',
    'Total price stream reconnect attempts'
)

stream_connected = Gauge(
    'coinboard_stream_connected',
    'Whether the price stream is connected (0/1)'
)

# Price table
price_table_symbols = Gauge(
    'coinboard_price_table_symbols',
    'Number of symbols held in the price table'
)

portfolio_value = Gauge(
    'coinboard_portfolio_value_usd',
    'Last computed portfolio value'
)

errors_total = Counter(
    'coinboard_errors_total',
    'Total errors surfaced to the user',
    ['operation']  # prices, movers, losers, portfolio, trade, refresh
)


class MetricsCollector:
    """Helper class for collecting and updating metrics."""

    def __init__(self, version: str = '1.0.0'):
        service_info.info({
            'version': version,
            'service': 'coinboard'
        })

    def record_error(self, operation: str):
        errors_total.labels(operation=operation).inc()

    def record_portfolio(self, total_value_usd: float):
        portfolio_value.set(total_value_usd)
