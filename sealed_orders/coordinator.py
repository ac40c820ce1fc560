"""Verification coordinator: decrypt with proof, then submit to the ledger."""

import logging
from dataclasses import dataclass

from .errors import AlreadyVerifiedError
from .fhe import FheClient
from .ledger import OrderLedger
from .order import TradeOrder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """
    Outcome of a verification request.

    Attributes:
        order_id: ID of the order
        amount: Proven amount
        price: Proven price
        already_verified: True if the order had been verified before this call
    """
    order_id: str
    amount: int
    price: int
    already_verified: bool = False


class VerificationCoordinator:
    """
    Drives an order from CREATED to VERIFIED.

    For an unverified order, requests decryption of each encrypted handle
    (one outstanding request at a time, one handle per request so that
    each proof binds to exactly one handle) and submits the values and
    proofs to the ledger. Nothing is retried.
    """

    def __init__(self, ledger: OrderLedger, fhe: FheClient):
        """
        Initialize the coordinator.

        Args:
            ledger: The ledger to verify against
            fhe: Collaborator serving decryption requests
        """
        self.ledger = ledger
        self.fhe = fhe

    def request_verification(self, order_id: str) -> VerificationResult:
        """
        Reveal and verify an order's amount.

        Already verified orders are answered from the ledger without
        contacting the FHE collaborator. Losing a verification race to
        another caller counts as success.

        Args:
            order_id: The order to verify

        Returns:
            The proven values

        Raises:
            OrderNotFoundError: If no such order exists
            DecryptionRequestError: If the FHE collaborator fails
            ProofVerificationError: If the ledger rejects the proofs
        """
        order = self.ledger.get_order(order_id)
        if order.is_verified:
            logger.info("Order %s already verified, skipping decryption", order_id)
            return self._stored_result(order)

        amount_result = self.fhe.request_decryption([order.encrypted_amount], self.ledger.address)
        amount = amount_result.clear_values[order.encrypted_amount]

        price = order.public_price
        price_proof = None
        if order.encrypted_price is not None:
            price_result = self.fhe.request_decryption([order.encrypted_price], self.ledger.address)
            price = price_result.clear_values[order.encrypted_price]
            price_proof = price_result.proof

        try:
            verified = self.ledger.verify(order_id, amount, amount_result.proof, price, price_proof)
        except AlreadyVerifiedError:
            logger.info("Order %s was verified concurrently, using stored values", order_id)
            return self._stored_result(self.ledger.get_order(order_id))

        return VerificationResult(
            order_id=order_id,
            amount=verified.decrypted_amount,
            price=verified.decrypted_price,
        )

    @staticmethod
    def _stored_result(order: TradeOrder) -> VerificationResult:
        return VerificationResult(
            order_id=order.order_id,
            amount=order.decrypted_amount,
            price=order.decrypted_price,
            already_verified=True,
        )
