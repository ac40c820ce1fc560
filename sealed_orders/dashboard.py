"""Aggregate views over ledger orders for the dashboard."""

from dataclasses import dataclass
from typing import Iterable, List

from .order import TradeOrder


@dataclass(frozen=True)
class TradingStats:
    """
    Summary figures for a set of orders.

    Attributes:
        total_orders: Number of orders
        verified_orders: Number of verified orders
        total_volume: Sum of amount * price over verified orders
        avg_price: Mean public price over all orders
    """
    total_orders: int
    verified_orders: int
    total_volume: int
    avg_price: float


def compute_stats(orders: Iterable[TradeOrder]) -> TradingStats:
    """Compute trading stats. Unverified amounts are unknown and add no volume."""
    orders = list(orders)
    verified = [o for o in orders if o.is_verified]
    volume = sum(o.decrypted_amount * o.public_price for o in verified)
    avg_price = sum(o.public_price for o in orders) / len(orders) if orders else 0.0
    return TradingStats(
        total_orders=len(orders),
        verified_orders=len(verified),
        total_volume=volume,
        avg_price=avg_price,
    )


def filter_orders(orders: Iterable[TradeOrder], search: str = "", verified_only: bool = False) -> List[TradeOrder]:
    """Filter by case-insensitive name substring and verification status."""
    needle = search.lower()
    return [
        o for o in orders
        if needle in o.name.lower() and (o.is_verified or not verified_only)
    ]


def orders_for_creator(orders: Iterable[TradeOrder], creator: str) -> List[TradeOrder]:
    """Orders created by `creator`. Addresses compare case-insensitively."""
    creator = creator.lower()
    return [o for o in orders if o.creator.lower() == creator]
