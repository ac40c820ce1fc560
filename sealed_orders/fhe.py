"""FHE collaborator interface and an in-process simulation.

The ledger never decrypts anything itself. It accepts ciphertext handles
with an input proof, and later accepts cleartext values together with a
decryption proof. Both checks are delegated to an `FheClient`.

`LocalFheClient` stands in for a real coprocessor/relayer: it keeps the
plaintexts in memory and authenticates handles and proofs with
HMAC-SHA256. It is meant for tests, the CLI demo and the demo web app.
"""

import hashlib
import hmac
import itertools
import threading
from dataclasses import dataclass
from typing import Dict, List, Protocol, Sequence, Tuple

from .errors import DecryptionRequestError

WORD_SIZE = 32
UINT32_MAX = 2**32 - 1


@dataclass(frozen=True)
class EncryptedInput:
    """
    A ciphertext handle plus its proof of well-formedness.

    Attributes:
        handle: Opaque hex reference to the ciphertext
        proof: Hex proof binding the handle to its context and owner
    """
    handle: str
    proof: str


@dataclass(frozen=True)
class DecryptionResult:
    """
    Cleartext values for a set of handles plus one aggregate proof.

    Attributes:
        clear_values: handle -> cleartext integer
        proof: Hex proof over the handles and their ABI encoded values
    """
    clear_values: Dict[str, int]
    proof: str


class FheClient(Protocol):
    def encrypt(self, target_context: str, owner: str, value: int) -> EncryptedInput:
        ...

    def verify_input(self, encrypted: EncryptedInput, target_context: str, owner: str) -> bool:
        ...

    def request_decryption(self, handles: Sequence[str], target_context: str) -> DecryptionResult:
        ...

    def check_signatures(self, handles: Sequence[str], clear_value_bytes: bytes, proof: str) -> bool:
        ...


def encode_clear_values(values: Sequence[int]) -> bytes:
    """ABI encode unsigned integers as consecutive 32-byte big-endian words."""
    encoded = bytearray()
    for value in values:
        if value < 0:
            raise ValueError(f"Cannot encode negative value {value}")
        if value.bit_length() > WORD_SIZE * 8:
            raise ValueError(f"Value {value} does not fit in {WORD_SIZE} bytes")
        encoded += value.to_bytes(WORD_SIZE, "big")
    return bytes(encoded)


def decode_clear_values(data: bytes) -> List[int]:
    """Inverse of `encode_clear_values`."""
    if len(data) % WORD_SIZE:
        raise ValueError(f"Encoded values must be a multiple of {WORD_SIZE} bytes")
    return [
        int.from_bytes(data[i:i + WORD_SIZE], "big")
        for i in range(0, len(data), WORD_SIZE)
    ]


class LocalFheClient:
    """
    Deterministic HMAC-based stand-in for the FHE service.

    Handles are only decryptable for the context they were encrypted for.
    """

    def __init__(self, secret: bytes):
        if not secret:
            raise ValueError("Secret must not be empty")
        self._secret = secret
        self._lock = threading.Lock()
        self._counter = itertools.count()
        # handle -> (plaintext, target context)
        self._plaintexts: Dict[str, Tuple[int, str]] = {}

    def _mac(self, *parts: bytes) -> str:
        return hmac.new(self._secret, b"|".join(parts), hashlib.sha256).hexdigest()

    def encrypt(self, target_context: str, owner: str, value: int) -> EncryptedInput:
        """
        Encrypt a uint32 for use by `target_context` on behalf of `owner`.

        Raises:
            ValueError: If the value does not fit in a uint32
        """
        if not 0 <= value <= UINT32_MAX:
            raise ValueError(f"Value {value} out of uint32 range")

        with self._lock:
            nonce = next(self._counter)
            handle = "0x" + self._mac(b"handle", str(nonce).encode(), target_context.encode(), owner.encode())
            self._plaintexts[handle] = (value, target_context)

        proof = self._mac(b"input", handle.encode(), target_context.encode(), owner.encode())
        return EncryptedInput(handle=handle, proof=proof)

    def verify_input(self, encrypted: EncryptedInput, target_context: str, owner: str) -> bool:
        with self._lock:
            known = encrypted.handle in self._plaintexts
        if not known:
            return False
        expected = self._mac(b"input", encrypted.handle.encode(), target_context.encode(), owner.encode())
        return hmac.compare_digest(expected.encode(), encrypted.proof.encode())

    def request_decryption(self, handles: Sequence[str], target_context: str) -> DecryptionResult:
        """
        Decrypt `handles` and prove the result.

        Raises:
            DecryptionRequestError: If a handle is unknown or not
                decryptable for this context
        """
        if not handles:
            raise DecryptionRequestError("No handles to decrypt")

        clear_values = {}
        with self._lock:
            for handle in handles:
                entry = self._plaintexts.get(handle)
                if entry is None:
                    raise DecryptionRequestError(f"Unknown ciphertext handle {handle}")
                value, context = entry
                if context != target_context:
                    raise DecryptionRequestError(f"Handle {handle} is not decryptable for {target_context}")
                clear_values[handle] = value

        encoded = encode_clear_values([clear_values[h] for h in handles])
        return DecryptionResult(clear_values=clear_values, proof=self._decryption_mac(handles, encoded))

    def check_signatures(self, handles: Sequence[str], clear_value_bytes: bytes, proof: str) -> bool:
        expected = self._decryption_mac(handles, clear_value_bytes)
        return hmac.compare_digest(expected.encode(), proof.encode())

    def _decryption_mac(self, handles: Sequence[str], clear_value_bytes: bytes) -> str:
        return self._mac(b"decrypt", ",".join(handles).encode(), clear_value_bytes)
