"""Tests for VerificationCoordinator."""

import pytest

from sealed_orders.coordinator import VerificationCoordinator
from sealed_orders.errors import (
    DecryptionRequestError,
    OrderNotFoundError,
    ProofVerificationError,
)
from sealed_orders.fhe import DecryptionResult, LocalFheClient
from sealed_orders.ledger import OrderLedger
from sealed_orders.sample_data import place_order

LEDGER = "0xledger"
ALICE = "0xalice"


class CountingFhe:
    """Wraps a FHE client and counts decryption requests."""

    def __init__(self, inner):
        self.inner = inner
        self.decryption_requests = []

    def encrypt(self, target_context, owner, value):
        return self.inner.encrypt(target_context, owner, value)

    def verify_input(self, encrypted, target_context, owner):
        return self.inner.verify_input(encrypted, target_context, owner)

    def request_decryption(self, handles, target_context):
        self.decryption_requests.append(list(handles))
        return self.inner.request_decryption(handles, target_context)

    def check_signatures(self, handles, clear_value_bytes, proof):
        return self.inner.check_signatures(handles, clear_value_bytes, proof)


class TestRequestVerification:
    def setup_method(self):
        self.fhe = CountingFhe(LocalFheClient(b"test-secret"))
        self.ledger = OrderLedger(self.fhe, address=LEDGER)
        self.coordinator = VerificationCoordinator(self.ledger, self.fhe)

    def create(self, order_id="A", amount=100, price=25, encrypt_price=False):
        encrypted = self.fhe.encrypt(LEDGER, ALICE, amount)
        encrypted_price = self.fhe.encrypt(LEDGER, ALICE, price) if encrypt_price else None
        return self.ledger.create_order(
            order_id, "Corporate Offset", encrypted, price, "Carbon Credit Order", ALICE,
            encrypted_price=encrypted_price,
        )

    def test_scenario_create_then_verify(self):
        self.create("A", amount=100, price=25)
        assert not self.ledger.get_order("A").is_verified

        result = self.coordinator.request_verification("A")

        assert result.amount == 100
        assert result.price == 25
        assert not result.already_verified
        order = self.ledger.get_order("A")
        assert order.is_verified
        assert order.decrypted_amount == 100

    def test_round_trip_preserves_plaintext(self):
        for i, amount in enumerate([0, 1, 4242, 2**32 - 1]):
            self.create(f"order-{i}", amount=amount)
            assert self.coordinator.request_verification(f"order-{i}").amount == amount

    def test_idempotent_fast_path(self):
        self.create("A", amount=100)
        first = self.coordinator.request_verification("A")
        requests_after_first = len(self.fhe.decryption_requests)

        second = self.coordinator.request_verification("A")

        assert second.amount == first.amount == 100
        assert second.already_verified
        assert len(self.fhe.decryption_requests) == requests_after_first

    def test_one_handle_per_request(self):
        order = self.create("A", amount=100, price=25, encrypt_price=True)

        result = self.coordinator.request_verification("A")

        assert result.price == 25
        assert self.fhe.decryption_requests == [[order.encrypted_amount], [order.encrypted_price]]

    def test_missing_order(self):
        with pytest.raises(OrderNotFoundError):
            self.coordinator.request_verification("missing-id")
        assert self.fhe.decryption_requests == []

    def test_lost_race_counts_as_success(self):
        self.create("A", amount=100)
        rival = VerificationCoordinator(self.ledger, self.fhe.inner)
        fhe = self.fhe

        class RacingFhe(CountingFhe):
            def request_decryption(self, handles, target_context):
                # Another party verifies while our request is in flight
                rival.request_verification("A")
                return fhe.request_decryption(handles, target_context)

        coordinator = VerificationCoordinator(self.ledger, RacingFhe(fhe.inner))
        result = coordinator.request_verification("A")

        assert result.already_verified
        assert result.amount == 100
        assert self.ledger.get_order("A").decrypted_amount == 100

    def test_decryption_failure_propagates(self):
        self.create("A")

        class BrokenFhe(CountingFhe):
            def request_decryption(self, handles, target_context):
                raise DecryptionRequestError("relayer unreachable")

        coordinator = VerificationCoordinator(self.ledger, BrokenFhe(self.fhe.inner))
        with pytest.raises(DecryptionRequestError) as exc_info:
            coordinator.request_verification("A")

        assert exc_info.value.step == "decryption"
        assert not self.ledger.get_order("A").is_verified

    def test_bad_proof_propagates_without_retry(self):
        order = self.create("A", amount=100)

        class LyingFhe(CountingFhe):
            def request_decryption(self, handles, target_context):
                self.decryption_requests.append(list(handles))
                return DecryptionResult(clear_values={h: 1 for h in handles}, proof="00" * 32)

        lying = LyingFhe(self.fhe.inner)
        coordinator = VerificationCoordinator(self.ledger, lying)
        with pytest.raises(ProofVerificationError):
            coordinator.request_verification("A")

        assert lying.decryption_requests == [[order.encrypted_amount]]
        assert not self.ledger.get_order("A").is_verified

    def test_retry_after_failure_succeeds(self):
        self.create("A", amount=100)

        class FlakyFhe(CountingFhe):
            failed = False

            def request_decryption(self, handles, target_context):
                if not self.failed:
                    self.failed = True
                    raise DecryptionRequestError("timeout")
                return super().request_decryption(handles, target_context)

        coordinator = VerificationCoordinator(self.ledger, FlakyFhe(self.fhe.inner))
        with pytest.raises(DecryptionRequestError):
            coordinator.request_verification("A")

        assert coordinator.request_verification("A").amount == 100

    def test_encrypted_price_differing_from_public_price_never_verifies(self):
        encrypted = self.fhe.encrypt(LEDGER, ALICE, 100)
        encrypted_price = self.fhe.encrypt(LEDGER, ALICE, 30)
        self.ledger.create_order(
            "B", "Mismatched", encrypted, 25, "Carbon Credit Order", ALICE,
            encrypted_price=encrypted_price,
        )

        for _ in range(2):
            with pytest.raises(ProofVerificationError, match="public price"):
                self.coordinator.request_verification("B")
        assert not self.ledger.get_order("B").is_verified

    def test_place_order_pairs_encrypted_and_public_price(self):
        place_order(self.ledger, "Paired", 100, 25, ALICE, order_id="C", encrypt_price=True)

        result = self.coordinator.request_verification("C")
        assert (result.amount, result.price) == (100, 25)
