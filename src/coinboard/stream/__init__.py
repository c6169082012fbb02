"""Live price stream and the event bus it publishes on."""

from .client import PriceStreamClient
from .event_bus import EventBus, Topic

__all__ = ["EventBus", "PriceStreamClient", "Topic"]
