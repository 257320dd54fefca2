"""
Tests for Ed25519 interaction signature verification.

These tests prove:
- A genuine signature over timestamp + body is accepted
- Any single-bit change to body, timestamp or signature is rejected
- Empty or undecodable inputs are rejected without crypto work
"""
import pytest
from nacl.signing import SigningKey

from grant.services.signature import verify_signature

TIMESTAMP = "1700000000"
BODY = b'{"type":1,"id":"abc"}'


@pytest.fixture(scope="module")
def signing_key():
    return SigningKey.generate()


@pytest.fixture(scope="module")
def public_key_hex(signing_key):
    return signing_key.verify_key.encode().hex()


@pytest.fixture(scope="module")
def signature(signing_key):
    return signing_key.sign(TIMESTAMP.encode() + BODY).signature


def _flip(data: bytes, bit: int) -> bytes:
    mutated = bytearray(data)
    mutated[bit // 8] ^= 1 << (bit % 8)
    return bytes(mutated)


class TestValidSignature:

    def test_accepts_genuine_signature(self, public_key_hex, signature):
        assert verify_signature(public_key_hex, TIMESTAMP, BODY, signature.hex()) is True

    def test_accepts_uppercase_hex(self, public_key_hex, signature):
        assert verify_signature(public_key_hex.upper(), TIMESTAMP, BODY, signature.hex().upper()) is True

    def test_rejects_other_key(self, signature):
        other = SigningKey.generate().verify_key.encode().hex()
        assert verify_signature(other, TIMESTAMP, BODY, signature.hex()) is False


class TestSingleBitMutation:
    """Every single-bit mutation must be rejected."""

    def test_body_mutation(self, public_key_hex, signature):
        for bit in range(len(BODY) * 8):
            assert verify_signature(public_key_hex, TIMESTAMP, _flip(BODY, bit), signature.hex()) is False

    def test_timestamp_mutation(self, public_key_hex, signature):
        raw = TIMESTAMP.encode()
        for index in range(len(raw)):
            # Low seven bits keep the header ASCII
            for bit in range(7):
                mutated = _flip(raw, index * 8 + bit).decode("ascii")
                assert verify_signature(public_key_hex, mutated, BODY, signature.hex()) is False

    def test_signature_mutation(self, public_key_hex, signature):
        for bit in range(len(signature) * 8):
            assert verify_signature(public_key_hex, TIMESTAMP, BODY, _flip(signature, bit).hex()) is False


class TestMalformedInput:

    @pytest.mark.parametrize("field", ["key", "timestamp", "signature"])
    def test_empty_inputs_rejected(self, field, public_key_hex, signature):
        args = {"key": public_key_hex, "timestamp": TIMESTAMP, "signature": signature.hex()}
        args[field] = ""
        assert verify_signature(args["key"], args["timestamp"], BODY, args["signature"]) is False

    def test_non_hex_signature_rejected(self, public_key_hex):
        assert verify_signature(public_key_hex, TIMESTAMP, BODY, "zz" * 64) is False

    def test_odd_length_key_rejected(self, public_key_hex, signature):
        assert verify_signature(public_key_hex[:-1], TIMESTAMP, BODY, signature.hex()) is False

    def test_short_key_rejected(self, public_key_hex, signature):
        assert verify_signature(public_key_hex[:32], TIMESTAMP, BODY, signature.hex()) is False

    def test_short_signature_rejected(self, public_key_hex, signature):
        assert verify_signature(public_key_hex, TIMESTAMP, BODY, signature.hex()[:64]) is False
