"""
Data models shared across components.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Exchange(str, Enum):
    """Supported exchanges."""
    BINANCE = "binance"
    COINBASE = "coinbase"


class OrderSide(str, Enum):
    """Order side."""
    BUY = "buy"
    SELL = "sell"


class PriceRecord(BaseModel):
    """Normalized price snapshot for one symbol."""
    model_config = ConfigDict(frozen=True)

    symbol: str = Field(description="Base asset, quote suffix stripped (e.g., BTC)")
    price: float
    change_24h: float = Field(description="24h change in percent")
    volume_24h: float = Field(description="24h base-asset volume")
    exchange: str = Field(default="Binance", description="Source exchange")
    market_cap: float = Field(default=0.0, description="Approximation: 24h quote volume")
    rank: int = 0
    price_change_1h: float = Field(default=0.0, description="Approximation: change_24h / 24")
    received_at: datetime = Field(default_factory=datetime.utcnow)


class Credential(BaseModel):
    """API key pair for one exchange."""
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(alias="apiKey")
    secret_key: SecretStr = Field(alias="secretKey")

    def to_profile(self) -> dict:
        return {"apiKey": self.api_key, "secretKey": self.secret_key.get_secret_value()}


class ExchangeCredentials(BaseModel):
    """Per-user credentials object as stored in the profile record."""
    binance: Optional[Credential] = None
    coinbase: Optional[Credential] = None

    def for_exchange(self, exchange: Exchange) -> Optional[Credential]:
        return getattr(self, exchange.value)

    @property
    def configured(self) -> List[Exchange]:
        return [exchange for exchange in Exchange if self.for_exchange(exchange) is not None]

    def to_profile(self) -> dict:
        return {
            exchange.value: self.for_exchange(exchange).to_profile()
            for exchange in self.configured
        }


class OrderRequest(BaseModel):
    """Single-shot limit order."""
    symbol: str
    side: OrderSide
    quantity: float = Field(gt=0)
    price: float = Field(gt=0)
    exchange: Optional[str] = None


class PortfolioAsset(BaseModel):
    """Holding of one asset across all exchanges."""
    symbol: str
    balance: float
    value_usd: float


class PortfolioSnapshot(BaseModel):
    """Portfolio valuation in the quote currency."""
    assets: List[PortfolioAsset] = Field(default_factory=list)
    total_value_usd: float = 0.0
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class NotificationLevel(str, Enum):
    """Notification severity."""
    INFO = "info"
    ERROR = "error"


class Notification(BaseModel):
    """User-facing message raised at a call boundary."""
    level: NotificationLevel
    message: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
