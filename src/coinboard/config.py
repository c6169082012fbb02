"""
Centralized configuration management using pydantic-settings.
All components should import Settings from this module.
"""

from typing import List, Optional
from enum import Enum
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Environment types."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class BinanceSettings(BaseSettings):
    """Binance exchange settings."""
    rest_url: str = Field(default="https://api.binance.com/api/v3", description="REST API URL")
    ws_url: str = Field(default="wss://stream.binance.com:9443/ws", description="Public ticker stream URL")
    account_endpoint: str = Field(default="/api/v3/account", description="Account endpoint forwarded through the proxy")
    use_balance_proxy: bool = Field(default=True, description="Route balance requests through the proxy function")

    model_config = SettingsConfigDict(env_prefix="BINANCE_")


class CoinbaseSettings(BaseSettings):
    """Coinbase exchange settings."""
    rest_url: str = Field(default="https://api.pro.coinbase.com", description="REST API URL")

    model_config = SettingsConfigDict(env_prefix="COINBASE_")


class SupabaseSettings(BaseSettings):
    """Auth and profile backend settings."""
    url: str = Field(default="http://localhost:54321", description="Supabase project URL")
    anon_key: Optional[str] = Field(default=None, description="Public anon key")
    profiles_table: str = Field(default="profiles", description="Table holding per-user api_keys")
    proxy_function: str = Field(default="binance-proxy", description="Edge function forwarding balance requests")

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    @property
    def functions_url(self) -> str:
        return f"{self.url.rstrip('/')}/functions/v1"


class MarketSettings(BaseSettings):
    """Market data settings."""
    quote_currency: str = Field(default="USDT", description="Quote currency every pair is denominated in")
    watched_coins: List[str] = Field(
        default=["BTC", "ETH", "SOL", "ADA", "DOT", "FET", "LINK", "AVAX"],
        description="Symbols always tracked",
    )
    request_timeout: float = Field(default=5.0, description="REST request timeout in seconds")
    refresh_interval: int = Field(default=30, description="Price table refresh interval in seconds")
    movers_limit: int = Field(default=25, description="Number of market movers returned")
    losers_limit: int = Field(default=15, description="Number of losers returned")
    default_exchange: str = Field(default="binance", description="Exchange used when an order names none")
    stale_after: int = Field(default=120, description="Seconds without a price update before data is stale")

    model_config = SettingsConfigDict(env_prefix="MARKET_")


class StreamSettings(BaseSettings):
    """Live price stream settings."""
    reconnect_base_delay: float = Field(default=5.0, description="Reconnect delay multiplied by the attempt number")
    max_reconnect_attempts: int = Field(default=5, description="Reconnect attempts before giving up")

    model_config = SettingsConfigDict(env_prefix="STREAM_")


class MonitoringSettings(BaseSettings):
    """Monitoring and observability settings."""
    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="json", description="Log format (json or text)")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    # Health checks
    readiness_timeout: int = Field(default=5, description="Readiness check timeout in seconds")

    model_config = SettingsConfigDict(env_prefix="MONITORING_")


class Settings(BaseSettings):
    """Main settings class combining all component settings."""
    # Environment
    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Environment")
    service_name: str = Field(default="coinboard", description="Service name")

    # Sub-settings
    binance: BinanceSettings = Field(default_factory=BinanceSettings)
    coinbase: CoinbaseSettings = Field(default_factory=CoinbaseSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    market: MarketSettings = Field(default_factory=MarketSettings)
    stream: StreamSettings = Field(default_factory=StreamSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False
    )


# Global settings instance
settings = Settings()
