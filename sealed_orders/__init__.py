"""Confidential trade-order ledger with FHE-backed verification"""

from .order import TradeOrder, OrderStatus
from .events import EventBus, TradeOrderCreated, DecryptionVerified
from .errors import (
    OrderError,
    DuplicateOrderError,
    InvalidCiphertextError,
    OrderNotFoundError,
    AlreadyVerifiedError,
    ProofVerificationError,
    DecryptionRequestError,
    LedgerUnavailableError,
)
from .fhe import EncryptedInput, DecryptionResult, FheClient, LocalFheClient
from .store import OrderStore, InMemoryOrderStore
from .ledger import OrderLedger
from .coordinator import VerificationCoordinator, VerificationResult
from .rwlock import RWLock

__all__ = [
    "TradeOrder", "OrderStatus",
    "EventBus", "TradeOrderCreated", "DecryptionVerified",
    "OrderError", "DuplicateOrderError", "InvalidCiphertextError", "OrderNotFoundError",
    "AlreadyVerifiedError", "ProofVerificationError", "DecryptionRequestError", "LedgerUnavailableError",
    "EncryptedInput", "DecryptionResult", "FheClient", "LocalFheClient",
    "OrderStore", "InMemoryOrderStore",
    "OrderLedger", "VerificationCoordinator", "VerificationResult", "RWLock",
]
