"""Error taxonomy for the order ledger."""

from typing import Optional


class OrderError(Exception):
    """
    Base class for ledger and verification failures.

    Attributes:
        order_id: The order the failure relates to (if any)
        step: Which stage failed: creation, lookup, decryption,
            verification or ledger
    """
    step = "ledger"

    def __init__(self, message: str, order_id: Optional[str] = None, step: Optional[str] = None):
        super().__init__(message)
        self.order_id = order_id
        if step is not None:
            self.step = step


class DuplicateOrderError(OrderError):
    """An order with the same id already exists."""
    step = "creation"


class InvalidCiphertextError(OrderError):
    """The encrypted input or its proof was rejected at creation."""
    step = "creation"


class OrderNotFoundError(OrderError):
    """No order with the given id."""
    step = "lookup"


class AlreadyVerifiedError(OrderError):
    """The order has already been verified."""
    step = "verification"


class ProofVerificationError(OrderError):
    """A cleartext/proof pair does not match the stored handle."""
    step = "verification"


class DecryptionRequestError(OrderError):
    """The FHE collaborator could not serve a decryption request."""
    step = "decryption"


class LedgerUnavailableError(OrderError):
    """The ledger could not be reached in time. Safe to retry."""
    step = "ledger"
