"""CLI demo interface for the order ledger."""

import logging

from .config import settings
from .coordinator import VerificationCoordinator
from .dashboard import compute_stats, filter_orders, orders_for_creator
from .errors import OrderError
from .ledger import OrderLedger
from .order import TradeOrder
from .sample_data import create_ledger, place_order


def print_order(order: TradeOrder) -> None:
    """Print a single order in detail."""
    print("\n" + "=" * 50)
    print(f"ORDER {order.order_id}")
    print("=" * 50)
    print(f"  Name:     {order.name}")
    print(f"  Asset:    {order.asset_type}")
    print(f"  Price:    {order.public_price}")
    if order.is_verified:
        print(f"  Amount:   {order.decrypted_amount} (verified)")
    else:
        print("  Amount:   <FHE encrypted>")
    print(f"  Creator:  {order.creator}")
    print(f"  Created:  {order.created_at:%Y-%m-%d %H:%M:%S}")
    print(f"  Handle:   {order.encrypted_amount[:18]}...")
    print("=" * 50 + "\n")


def print_orders(orders: list) -> None:
    """Print a one-line summary per order."""
    if not orders:
        print("  (no orders)")
        return
    for order in orders:
        amount = f"{order.decrypted_amount:>8}" if order.is_verified else "  locked"
        status = "verified" if order.is_verified else "pending"
        print(f"  {order.order_id:<20} {amount} @ {order.public_price:<6} {status:<9} {order.name}")


def print_stats(ledger: OrderLedger) -> None:
    """Print trading stats."""
    stats = compute_stats(ledger.list_orders())
    print(f"\n  Total orders:   {stats.total_orders}")
    print(f"  Verified:       {stats.verified_orders}/{stats.total_orders}")
    print(f"  Trading volume: {stats.total_volume}")
    print(f"  Avg price:      {stats.avg_price:.1f}\n")


def print_help() -> None:
    """Print help message."""
    print("""
Confidential Order Ledger Demo - Commands:
  create <amount> <price> <name>  - Create an order with an encrypted amount
  verify <id>                     - Decrypt and verify an order's amount
  show <id>                       - Show an order
  list [search]                   - List orders, optionally filtered by name
  verified                        - List verified orders only
  mine                            - List orders created by you
  stats                           - Show trading stats
  status                          - Check ledger availability
  help                            - Show this help
  quit                            - Exit

Examples:
  create 100 25 Corporate Offset  - Encrypt 100 tons at a public price of 25
  verify carbon-1700000000000     - Reveal the amount with a decryption proof
""")


def run_demo() -> None:
    """Run the interactive demo."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    ledger, coordinator = create_ledger()
    creator = settings.DEFAULT_CREATOR

    print("\nConfidential Order Ledger Demo")
    print(f"Acting as {creator}")
    print("Type 'help' for commands\n")

    while True:
        try:
            user_input = input("> ").strip()

            if not user_input:
                continue

            parts = user_input.split()
            command = parts[0].lower()

            if command == "quit":
                print("Goodbye!")
                break

            elif command == "help":
                print_help()

            elif command == "create" and len(parts) >= 4:
                amount = int(parts[1])
                price = int(parts[2])
                name = " ".join(parts[3:])
                order = place_order(ledger, name, amount, price, creator)
                print(f"Created: {order}")

            elif command == "verify" and len(parts) == 2:
                run_verification(coordinator, parts[1])

            elif command == "show" and len(parts) == 2:
                print_order(ledger.get_order(parts[1]))

            elif command == "list":
                search = " ".join(parts[1:])
                print_orders(filter_orders(ledger.list_orders(), search=search))

            elif command == "verified":
                print_orders(filter_orders(ledger.list_orders(), verified_only=True))

            elif command == "mine":
                print_orders(orders_for_creator(ledger.list_orders(), creator))

            elif command == "stats":
                print_stats(ledger)

            elif command == "status":
                if ledger.is_available():
                    print("Ledger is available")
                else:
                    print("Ledger is NOT available")

            else:
                print("Invalid command. Type 'help' for usage.")

        except OrderError as e:
            print(f"Error [{e.step}]: {e}")
        except ValueError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            print("\nGoodbye!")
            break
        except EOFError:
            print("\nGoodbye!")
            break


def run_verification(coordinator: VerificationCoordinator, order_id: str) -> None:
    """Verify an order and report the outcome."""
    result = coordinator.request_verification(order_id)
    if result.already_verified:
        print(f"Already verified: {result.amount} @ {result.price}")
    else:
        print(f"Verified: {result.amount} @ {result.price}")


if __name__ == "__main__":
    run_demo()
