"""Order ledger: creation and verification of confidential trade orders."""

import logging
from datetime import datetime
from typing import List, Optional

from .errors import (
    AlreadyVerifiedError,
    DuplicateOrderError,
    InvalidCiphertextError,
    OrderNotFoundError,
    ProofVerificationError,
)
from .events import DecryptionVerified, EventBus, TradeOrderCreated
from .fhe import UINT32_MAX, EncryptedInput, FheClient, encode_clear_values
from .order import OrderStatus, TradeOrder
from .store import InMemoryOrderStore, OrderStore

logger = logging.getLogger(__name__)

DEFAULT_LEDGER_ADDRESS = "0x0000000000000000000000000000000000000000"


class OrderLedger:
    """
    Append-only ledger of confidential trade orders.

    Orders are created with an encrypted amount and later verified by
    submitting the cleartext amount and price together with decryption
    proofs. Each order can be verified exactly once.

    Mutation only happens through `create_order` and `verify`; every
    other method is a read.
    """

    def __init__(
        self,
        fhe: FheClient,
        store: Optional[OrderStore] = None,
        events: Optional[EventBus] = None,
        address: str = DEFAULT_LEDGER_ADDRESS,
    ):
        """
        Initialize the ledger.

        Args:
            fhe: Collaborator that validates inputs and decryption proofs
            store: Backing store (defaults to an in-memory store)
            events: Channel notifications are published on
            address: Context ciphertexts must be bound to
        """
        self.fhe = fhe
        self.store = store if store is not None else InMemoryOrderStore()
        self.events = events if events is not None else EventBus()
        self.address = address

    def create_order(
        self,
        order_id: str,
        name: str,
        encrypted_amount: EncryptedInput,
        public_price: int,
        asset_type: str,
        creator: str,
        public_value2: int = 0,
        encrypted_price: Optional[EncryptedInput] = None,
    ) -> TradeOrder:
        """
        Create a new order.

        Args:
            order_id: Identifier chosen by the creator
            name: Descriptive name
            encrypted_amount: Encrypted amount with its input proof
            public_price: Plaintext price
            asset_type: Descriptive asset category
            creator: Calling account
            public_value2: Secondary public value
            encrypted_price: Optional encrypted copy of the price. Its
                plaintext must equal `public_price`; the ledger cannot
                read it here, and an order whose encrypted price differs
                can never be verified.

        Returns:
            The stored order

        Raises:
            DuplicateOrderError: If the id is already taken
            InvalidCiphertextError: If an encrypted input is rejected
            ValueError: If a field value is invalid
        """
        if self.store.get(order_id) is not None:
            raise DuplicateOrderError(f"Order {order_id} already exists", order_id=order_id)

        if not self.fhe.verify_input(encrypted_amount, self.address, creator):
            raise InvalidCiphertextError(f"Encrypted amount for {order_id} failed input verification", order_id=order_id)
        if encrypted_price is not None and not self.fhe.verify_input(encrypted_price, self.address, creator):
            raise InvalidCiphertextError(f"Encrypted price for {order_id} failed input verification", order_id=order_id)

        order = TradeOrder(
            order_id=order_id,
            name=name,
            encrypted_amount=encrypted_amount.handle,
            public_price=public_price,
            asset_type=asset_type,
            creator=creator,
            created_at=datetime.now(),
            public_value2=public_value2,
            encrypted_price=encrypted_price.handle if encrypted_price is not None else None,
        )

        # Existence was checked above without a lock; the insert decides
        if not self.store.put_if_absent(order):
            raise DuplicateOrderError(f"Order {order_id} already exists", order_id=order_id)

        logger.info("Created order %s by %s", order_id, creator)
        self.events.publish(TradeOrderCreated(order_id=order_id, creator=creator))
        return order

    def get_order(self, order_id: str) -> TradeOrder:
        """
        Look up an order by ID.

        Raises:
            OrderNotFoundError: If no such order exists
        """
        order = self.store.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} does not exist", order_id=order_id)
        return order

    def get_encrypted_amount(self, order_id: str) -> str:
        """Return the ciphertext handle of an order's amount."""
        return self.get_order(order_id).encrypted_amount

    def list_order_ids(self) -> List[str]:
        """Return all ids in creation order."""
        return self.store.ids()

    def list_orders(self) -> List[TradeOrder]:
        """Return snapshots of all orders in creation order."""
        return self._snapshots(self.store.ids())

    def orders_in_price_range(self, min_price: Optional[int] = None, max_price: Optional[int] = None) -> List[TradeOrder]:
        """Return orders with min_price <= public_price <= max_price, cheapest first."""
        return self._snapshots(self.store.ids_in_price_range(min_price, max_price))

    def _snapshots(self, order_ids: List[str]) -> List[TradeOrder]:
        result = []
        for order_id in order_ids:
            order = self.store.get(order_id)
            if order is not None:
                result.append(order)
        return result

    def verify(
        self,
        order_id: str,
        clear_amount: int,
        amount_proof: str,
        clear_price: int,
        price_proof: Optional[str] = None,
    ) -> TradeOrder:
        """
        Accept proven cleartext values and mark the order verified.

        Each proof is checked against its own handle only. Orders created
        without an encrypted price take no price proof; the submitted price
        must then equal the public price.

        Returns:
            The verified order

        Raises:
            OrderNotFoundError: If no such order exists
            AlreadyVerifiedError: If the order was verified before
            ProofVerificationError: If a value/proof pair does not validate
        """
        order = self.store.get(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order {order_id} does not exist", order_id=order_id, step="verification")

        if order.is_verified:
            raise AlreadyVerifiedError(f"Order {order_id} is already verified", order_id=order_id)

        self._check_proofs(order, clear_amount, amount_proof, clear_price, price_proof)

        updated = order.verified(clear_amount, clear_price, datetime.now())
        if not self.store.compare_and_set(order_id, OrderStatus.CREATED, updated):
            raise AlreadyVerifiedError(f"Order {order_id} is already verified", order_id=order_id)

        logger.info("Verified order %s: amount=%d price=%d", order_id, clear_amount, clear_price)
        self.events.publish(DecryptionVerified(order_id=order_id, amount=clear_amount, price=clear_price))
        return updated

    def _check_proofs(
        self,
        order: TradeOrder,
        clear_amount: int,
        amount_proof: str,
        clear_price: int,
        price_proof: Optional[str],
    ) -> None:
        """Raise ProofVerificationError unless both values are proven."""
        order_id = order.order_id

        if clear_amount < 0 or clear_price < 0:
            raise ProofVerificationError(f"Negative cleartext submitted for {order_id}", order_id=order_id)
        if clear_amount > UINT32_MAX or clear_price > UINT32_MAX:
            raise ProofVerificationError(f"Cleartext out of uint32 range for {order_id}", order_id=order_id)

        if not self.fhe.check_signatures([order.encrypted_amount], encode_clear_values([clear_amount]), amount_proof):
            logger.warning("Rejected amount proof for order %s", order_id)
            raise ProofVerificationError(f"Amount proof does not match order {order_id}", order_id=order_id)

        if order.encrypted_price is not None:
            if price_proof is None:
                raise ProofVerificationError(f"Order {order_id} requires a price proof", order_id=order_id)
            if not self.fhe.check_signatures([order.encrypted_price], encode_clear_values([clear_price]), price_proof):
                logger.warning("Rejected price proof for order %s", order_id)
                raise ProofVerificationError(f"Price proof does not match order {order_id}", order_id=order_id)

        if clear_price != order.public_price:
            logger.warning("Price mismatch for order %s: %d != %d", order_id, clear_price, order.public_price)
            raise ProofVerificationError(
                f"Price {clear_price} does not match public price {order.public_price} of order {order_id}",
                order_id=order_id,
            )

    def is_available(self) -> bool:
        """Liveness check. True if the backing store is reachable."""
        try:
            return self.store.ping()
        except Exception:
            logger.exception("Order store ping failed")
            return False

    def __len__(self) -> int:
        return len(self.store)

    def __repr__(self) -> str:
        return f"OrderLedger(address={self.address}, orders={len(self)})"
