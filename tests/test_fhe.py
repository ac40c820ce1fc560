"""Tests for the local FHE collaborator."""

import pytest

from sealed_orders.errors import DecryptionRequestError
from sealed_orders.fhe import (
    EncryptedInput,
    LocalFheClient,
    decode_clear_values,
    encode_clear_values,
)

LEDGER = "0xledger"
OWNER = "0xowner"


class TestClearValueEncoding:
    def test_words_are_32_bytes_big_endian(self):
        encoded = encode_clear_values([1, 256])
        assert len(encoded) == 64
        assert encoded[31] == 1
        assert encoded[62:64] == b"\x01\x00"
        assert decode_clear_values(encoded) == [1, 256]

    def test_negative_values_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            encode_clear_values([-1])

    def test_values_wider_than_a_word_rejected(self):
        assert len(encode_clear_values([2**256 - 1])) == 32
        with pytest.raises(ValueError, match="does not fit"):
            encode_clear_values([2**256])

    def test_decode_requires_whole_words(self):
        with pytest.raises(ValueError, match="multiple of 32"):
            decode_clear_values(b"\x00" * 31)


class TestLocalFheClient:
    def setup_method(self):
        self.fhe = LocalFheClient(b"test-secret")

    def test_encrypt_produces_verifiable_input(self):
        encrypted = self.fhe.encrypt(LEDGER, OWNER, 100)
        assert encrypted.handle.startswith("0x")
        assert self.fhe.verify_input(encrypted, LEDGER, OWNER)

    def test_handles_are_unique(self):
        first = self.fhe.encrypt(LEDGER, OWNER, 100)
        second = self.fhe.encrypt(LEDGER, OWNER, 100)
        assert first.handle != second.handle

    def test_input_bound_to_owner_and_context(self):
        encrypted = self.fhe.encrypt(LEDGER, OWNER, 100)
        assert not self.fhe.verify_input(encrypted, LEDGER, "0xsomeoneelse")
        assert not self.fhe.verify_input(encrypted, "0xotherledger", OWNER)

    def test_forged_inputs_rejected(self):
        encrypted = self.fhe.encrypt(LEDGER, OWNER, 100)
        assert not self.fhe.verify_input(EncryptedInput(encrypted.handle, "00" * 32), LEDGER, OWNER)
        assert not self.fhe.verify_input(EncryptedInput("0xunknown", encrypted.proof), LEDGER, OWNER)

    def test_value_must_fit_uint32(self):
        with pytest.raises(ValueError, match="uint32"):
            self.fhe.encrypt(LEDGER, OWNER, 2**32)
        with pytest.raises(ValueError, match="uint32"):
            self.fhe.encrypt(LEDGER, OWNER, -1)

    def test_decryption_round_trip(self):
        encrypted = self.fhe.encrypt(LEDGER, OWNER, 100)
        result = self.fhe.request_decryption([encrypted.handle], LEDGER)

        assert result.clear_values == {encrypted.handle: 100}
        assert self.fhe.check_signatures([encrypted.handle], encode_clear_values([100]), result.proof)

    def test_proof_rejects_other_value(self):
        encrypted = self.fhe.encrypt(LEDGER, OWNER, 100)
        result = self.fhe.request_decryption([encrypted.handle], LEDGER)
        assert not self.fhe.check_signatures([encrypted.handle], encode_clear_values([101]), result.proof)

    def test_proof_rejects_other_handle(self):
        first = self.fhe.encrypt(LEDGER, OWNER, 100)
        second = self.fhe.encrypt(LEDGER, OWNER, 100)
        result = self.fhe.request_decryption([first.handle], LEDGER)
        assert not self.fhe.check_signatures([second.handle], encode_clear_values([100]), result.proof)

    def test_aggregate_proof_does_not_validate_single_handle(self):
        first = self.fhe.encrypt(LEDGER, OWNER, 100)
        second = self.fhe.encrypt(LEDGER, OWNER, 25)
        result = self.fhe.request_decryption([first.handle, second.handle], LEDGER)

        assert self.fhe.check_signatures(
            [first.handle, second.handle], encode_clear_values([100, 25]), result.proof
        )
        assert not self.fhe.check_signatures([first.handle], encode_clear_values([100]), result.proof)

    def test_unknown_handle(self):
        with pytest.raises(DecryptionRequestError, match="Unknown ciphertext handle"):
            self.fhe.request_decryption(["0xmissing"], LEDGER)

    def test_wrong_context(self):
        encrypted = self.fhe.encrypt(LEDGER, OWNER, 100)
        with pytest.raises(DecryptionRequestError, match="not decryptable"):
            self.fhe.request_decryption([encrypted.handle], "0xotherledger")

    def test_empty_request(self):
        with pytest.raises(DecryptionRequestError):
            self.fhe.request_decryption([], LEDGER)

    def test_secrets_produce_different_proofs(self):
        other = LocalFheClient(b"other-secret")
        encrypted = self.fhe.encrypt(LEDGER, OWNER, 7)
        result = self.fhe.request_decryption([encrypted.handle], LEDGER)
        assert not other.check_signatures([encrypted.handle], encode_clear_values([7]), result.proof)

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError, match="Secret"):
            LocalFheClient(b"")
