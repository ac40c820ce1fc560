"""Ledger wiring and sample data for the demo and web app."""

import time
from typing import Optional, Tuple

from .config import Settings, settings
from .coordinator import VerificationCoordinator
from .dashboard import compute_stats
from .events import EventBus
from .fhe import LocalFheClient
from .ledger import OrderLedger
from .order import TradeOrder
from .store import InMemoryOrderStore


def new_order_id(prefix: str = "carbon") -> str:
    """Generate an order id from the current time in milliseconds."""
    return f"{prefix}-{int(time.time() * 1000)}"


def create_ledger(config: Settings = settings) -> Tuple[OrderLedger, VerificationCoordinator]:
    """
    Create an empty ledger backed by the local FHE simulation.

    Returns:
        Tuple of (OrderLedger, VerificationCoordinator)
    """
    fhe = LocalFheClient(config.FHE_SECRET.encode())
    ledger = OrderLedger(
        fhe,
        store=InMemoryOrderStore(lock_timeout=config.LOCK_TIMEOUT_SECONDS),
        events=EventBus(history_size=config.EVENT_HISTORY_SIZE),
        address=config.LEDGER_ADDRESS,
    )
    return ledger, VerificationCoordinator(ledger, fhe)


def place_order(
    ledger: OrderLedger,
    name: str,
    amount: int,
    price: int,
    creator: str,
    order_id: Optional[str] = None,
    asset_type: str = settings.DEFAULT_ASSET_TYPE,
    encrypt_price: bool = False,
) -> TradeOrder:
    """
    Encrypt `amount` on the creator's behalf and create the order.

    This plays the part of the wallet-side SDK.
    """
    encrypted_amount = ledger.fhe.encrypt(ledger.address, creator, amount)
    encrypted_price = ledger.fhe.encrypt(ledger.address, creator, price) if encrypt_price else None
    return ledger.create_order(
        order_id or new_order_id(),
        name,
        encrypted_amount,
        price,
        asset_type,
        creator,
        encrypted_price=encrypted_price,
    )


def create_sample_ledger(config: Settings = settings) -> Tuple[OrderLedger, VerificationCoordinator]:
    """
    Create a ledger with sample data.

    Returns:
        Tuple of (OrderLedger, VerificationCoordinator) with pre-populated orders
    """
    ledger, coordinator = create_ledger(config)

    # (id, name, amount, price, creator, verified)
    sample_orders = [
        ("carbon-1001", "Corporate Carbon Offset 2024", 120, 25, config.DEFAULT_CREATOR, True),
        ("carbon-1002", "Reforestation Credits Q3", 300, 18, config.DEFAULT_CREATOR, False),
        ("carbon-1003", "Wind Farm Allowance", 75, 32, "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC", True),
        ("carbon-1004", "Methane Capture Batch", 200, 21, "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC", False),
        ("carbon-1005", "Blue Carbon Mangroves", 50, 40, "0x90F79bf6EB2c4f870365E785982E1f101E93b906", False),
    ]

    for order_id, name, amount, price, creator, verified in sample_orders:
        place_order(ledger, name, amount, price, creator, order_id=order_id, asset_type=config.DEFAULT_ASSET_TYPE)
        if verified:
            coordinator.request_verification(order_id)

    return ledger, coordinator


def print_full_ledger(ledger: OrderLedger) -> None:
    """Print every order and the trading stats."""
    orders = ledger.list_orders()

    print("\n" + "=" * 72)
    print("ORDER LEDGER")
    print("=" * 72)
    print(f"{'ID':<16} | {'Name':<30} | {'Price':>6} | {'Amount':>10}")
    print("-" * 72)
    for order in orders:
        amount = str(order.decrypted_amount) if order.is_verified else "encrypted"
        print(f"{order.order_id:<16} | {order.name[:30]:<30} | {order.public_price:>6} | {amount:>10}")

    stats = compute_stats(orders)
    print("-" * 72)
    print(
        f"  Orders: {stats.total_orders}  |  Verified: {stats.verified_orders}  |  "
        f"Volume: {stats.total_volume}  |  Avg price: {stats.avg_price:.1f}"
    )
    print("=" * 72)


if __name__ == "__main__":
    ledger, coordinator = create_sample_ledger()
    print_full_ledger(ledger)

    print("\n> Verify carbon-1002:")
    result = coordinator.request_verification("carbon-1002")
    print(f"  Revealed amount {result.amount} @ {result.price}")

    print("\nLedger after verification:")
    print_full_ledger(ledger)
