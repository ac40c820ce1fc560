"""Ledger notifications and the channel they are published on."""

import logging
import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeOrderCreated:
    """
    Published after an order has been committed to the ledger.

    Attributes:
        order_id: ID of the new order
        creator: Account that created it
        timestamp: Publication time (auto-generated)
    """
    order_id: str
    creator: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class DecryptionVerified:
    """
    Published after an order's decrypted values have been accepted.

    Attributes:
        order_id: ID of the verified order
        amount: Proven amount
        price: Proven price
        timestamp: Publication time (auto-generated)
    """
    order_id: str
    amount: int
    price: int
    timestamp: datetime = field(default_factory=datetime.now)


LedgerEvent = Union[TradeOrderCreated, DecryptionVerified]
EventHandler = Callable[[LedgerEvent], None]


class EventBus:
    """
    Synchronous fan-out of ledger events to subscribed callbacks.

    Keeps a bounded history of recent events for dashboards.
    """

    def __init__(self, history_size: int = 100):
        self._lock = threading.Lock()
        self._handlers: List[EventHandler] = []
        self._history: Deque[LedgerEvent] = deque(maxlen=history_size)

    def subscribe(self, handler: EventHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def publish(self, event: LedgerEvent) -> None:
        """
        Deliver an event to every subscriber.

        A failing subscriber is logged and skipped; the event has already
        been committed and is still delivered to the others.
        """
        with self._lock:
            self._history.append(event)
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler %r failed for %s", handler, event)

    def recent(self, limit: int = 20) -> List[LedgerEvent]:
        """Return up to `limit` most recent events, newest first."""
        with self._lock:
            events = list(self._history)
        return list(reversed(events))[:limit]
