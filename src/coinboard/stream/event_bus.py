"""
In-process publish/subscribe with an explicit topic enumeration.
"""

from enum import Enum
from typing import Any, Callable, Dict

from src.coinboard.logging import get_logger

logger = get_logger(__name__)

Handler = Callable[[Any], None]


class Topic(str, Enum):
    """Topics carried by the bus."""
    PRICE = "price"                # PriceRecord
    NOTIFICATION = "notification"  # Notification


class EventBus:
    """Synchronous fan-out of events to per-topic handler sets.

    Each topic holds a de-duplicated, insertion-ordered set of handlers:
    subscribing a handler twice is a no-op, and so is unsubscribing one that
    was never registered.
    """

    def __init__(self):
        # dict keys keep insertion order and give set semantics
        self._handlers: Dict[Topic, Dict[Handler, None]] = {topic: {} for topic in Topic}

    def subscribe(self, topic: Topic, handler: Handler) -> None:
        self._handlers[Topic(topic)].setdefault(handler, None)

    def unsubscribe(self, topic: Topic, handler: Handler) -> None:
        self._handlers[Topic(topic)].pop(handler, None)

    def handler_count(self, topic: Topic) -> int:
        return len(self._handlers[Topic(topic)])

    def publish(self, topic: Topic, event: Any) -> int:
        """Call every handler of ``topic`` with ``event``; returns how many ran.

        A handler that raises is logged and does not stop delivery to the rest.
        """
        topic = Topic(topic)
        delivered = 0
        for handler in list(self._handlers[topic]):
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.opt(exception=True).error(f"Handler {handler!r} failed on {topic.value}: {e}")
        return delivered

    def clear(self) -> None:
        for handlers in self._handlers.values():
            handlers.clear()
