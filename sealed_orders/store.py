"""Storage substrate for the order ledger."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from sortedcontainers import SortedDict

from .order import OrderStatus, TradeOrder
from .rwlock import RWLock


class OrderStore(ABC):
    """
    Durable key-value storage for orders keyed by id.

    Implementations must make `put_if_absent` and `compare_and_set`
    atomic with respect to each other for the same id.
    """

    @abstractmethod
    def get(self, order_id: str) -> Optional[TradeOrder]:
        """Return the stored snapshot, or None."""

    @abstractmethod
    def put_if_absent(self, order: TradeOrder) -> bool:
        """Insert a new order and append its id to the index. False if the id exists."""

    @abstractmethod
    def compare_and_set(self, order_id: str, expected: OrderStatus, updated: TradeOrder) -> bool:
        """Replace the snapshot only if its status is still `expected`."""

    @abstractmethod
    def ids(self) -> List[str]:
        """All ids in insertion order."""

    @abstractmethod
    def ids_in_price_range(self, min_price: Optional[int] = None, max_price: Optional[int] = None) -> List[str]:
        """Ids whose public price lies in [min_price, max_price], by ascending price."""

    @abstractmethod
    def ping(self) -> bool:
        """Liveness check with no side effects."""

    @abstractmethod
    def __len__(self) -> int:
        ...


class InMemoryOrderStore(OrderStore):
    """
    Thread-safe in-process order store.

    Orders are kept in a dict plus an insertion-ordered id list. A
    SortedDict keyed by public price backs range queries; ids within a
    price level keep insertion order.
    """

    def __init__(self, lock_timeout: Optional[float] = None):
        self._orders: Dict[str, TradeOrder] = {}
        self._index: List[str] = []
        self._by_price: SortedDict = SortedDict()
        self._rwlock = RWLock(timeout=lock_timeout)

    def get(self, order_id: str) -> Optional[TradeOrder]:
        with self._rwlock.read():
            return self._orders.get(order_id)

    def put_if_absent(self, order: TradeOrder) -> bool:
        with self._rwlock.write():
            if order.order_id in self._orders:
                return False
            self._orders[order.order_id] = order
            self._index.append(order.order_id)
            self._by_price.setdefault(order.public_price, []).append(order.order_id)
            return True

    def compare_and_set(self, order_id: str, expected: OrderStatus, updated: TradeOrder) -> bool:
        if updated.order_id != order_id:
            raise ValueError(f"Snapshot for {updated.order_id} cannot replace {order_id}")

        with self._rwlock.write():
            current = self._orders.get(order_id)
            if current is None or current.status != expected:
                return False
            if current.public_price != updated.public_price:
                raise ValueError("Public price is immutable")
            self._orders[order_id] = updated
            return True

    def ids(self) -> List[str]:
        with self._rwlock.read():
            return list(self._index)

    def ids_in_price_range(self, min_price: Optional[int] = None, max_price: Optional[int] = None) -> List[str]:
        with self._rwlock.read():
            result = []
            for price in self._by_price.irange(min_price, max_price):
                result.extend(self._by_price[price])
            return result

    def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        with self._rwlock.read():
            return len(self._orders)

    def __repr__(self) -> str:
        with self._rwlock.read():
            return f"InMemoryOrderStore(orders={len(self._orders)}, price_levels={len(self._by_price)})"
