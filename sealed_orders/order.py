"""Trade order data model."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderStatus(Enum):
    """Lifecycle state of an order."""
    CREATED = "CREATED"
    VERIFIED = "VERIFIED"


@dataclass(frozen=True)
class TradeOrder:
    """
    A confidential trade order.

    Instances are immutable snapshots. The ledger replaces the stored
    snapshot as a whole when an order is verified.

    Attributes:
        order_id: Identifier chosen by the creator
        name: Descriptive name
        encrypted_amount: Ciphertext handle of the private amount
        public_price: Plaintext price, visible to everyone
        asset_type: Descriptive asset category
        creator: Account that created the order
        created_at: Creation time
        public_value2: Secondary public value
        encrypted_price: Optional ciphertext handle of the price
        status: CREATED or VERIFIED
        decrypted_amount: Proven amount (only set once verified)
        decrypted_price: Proven price (only set once verified)
        verified_at: Verification time (only set once verified)
    """
    order_id: str
    name: str
    encrypted_amount: str
    public_price: int
    asset_type: str
    creator: str
    created_at: datetime
    public_value2: int = 0
    encrypted_price: Optional[str] = None
    status: OrderStatus = OrderStatus.CREATED
    decrypted_amount: Optional[int] = None
    decrypted_price: Optional[int] = None
    verified_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.order_id:
            raise ValueError("Order id must not be empty")

        if not self.encrypted_amount:
            raise ValueError("Encrypted amount handle must not be empty")

        if self.public_price < 0:
            raise ValueError("Price must not be negative")

        if self.public_value2 < 0:
            raise ValueError("Public value must not be negative")

        verified = self.status == OrderStatus.VERIFIED
        if not verified and (self.decrypted_amount is not None or self.decrypted_price is not None):
            raise ValueError("Decrypted values are only allowed on verified orders")
        if verified and self.decrypted_amount is None:
            raise ValueError("Verified orders must carry a decrypted amount")

    @property
    def is_verified(self) -> bool:
        """Check if the order has been verified."""
        return self.status == OrderStatus.VERIFIED

    def verified(self, amount: int, price: int, verified_at: datetime) -> "TradeOrder":
        """
        Return a verified copy of this order.

        Raises:
            ValueError: If the order is already verified
        """
        if self.is_verified:
            raise ValueError(f"Order {self.order_id} is already verified")
        return replace(
            self,
            status=OrderStatus.VERIFIED,
            decrypted_amount=amount,
            decrypted_price=price,
            verified_at=verified_at,
        )

    def __repr__(self) -> str:
        amount_str = str(self.decrypted_amount) if self.is_verified else "<encrypted>"
        return (
            f"TradeOrder({self.order_id} {self.name!r} {amount_str} "
            f"@ {self.public_price}, {self.status.value})"
        )
