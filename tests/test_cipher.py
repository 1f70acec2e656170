"""Tests for the Keccak packing and amount encryption collaborators."""

import json

import pytest

from cipher.encryption import (
    DecryptionError,
    decrypt_amount,
    decrypt_data,
    encrypt_amount,
    encrypt_data,
    generate_random_secret,
    hash_secret,
)
from cipher.keyed_hash import (
    ZERO_HASH,
    hash_pair,
    hex_to_bytes,
    keccak256,
    solidity_keccak256,
    solidity_packed,
)
from config.config import EncryptionConfig

FAST = EncryptionConfig(pbkdf2_iterations=1000)


class TestKeccak:

    def test_empty_input_vector(self) -> None:
        assert keccak256(b"") == "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"

    def test_output_shape(self) -> None:
        digest = keccak256(b"x402")
        assert digest.startswith("0x")
        assert len(digest) == 66

    def test_zero_hash(self) -> None:
        assert hex_to_bytes(ZERO_HASH) == bytes(32)


class TestPackedEncoding:

    def test_address_and_uint(self, from_address) -> None:
        packed = solidity_packed(["address", "uint256"], [from_address, 1])
        assert len(packed) == 52
        assert packed[:20] == bytes([0x11] * 20)
        assert packed[-1] == 1

    def test_string_is_raw_utf8(self) -> None:
        assert solidity_packed(["string"], ["héllo"]) == "héllo".encode("utf-8")

    def test_bytes32(self) -> None:
        value = "0x" + "ff" * 32
        assert solidity_packed(["bytes32"], [value]) == bytes([0xff] * 32)

    def test_invalid_address(self) -> None:
        with pytest.raises(ValueError):
            solidity_packed(["address"], ["0x1234"])

    def test_uint_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            solidity_packed(["uint256"], [-1])
        with pytest.raises(ValueError):
            solidity_packed(["uint256"], [2 ** 256])

    def test_type_count_mismatch(self) -> None:
        with pytest.raises(ValueError):
            solidity_packed(["uint256", "string"], [1])

    def test_unsupported_type(self) -> None:
        with pytest.raises(ValueError):
            solidity_packed(["bool"], [True])

    def test_solidity_keccak_is_hash_of_packing(self, from_address) -> None:
        packed = solidity_packed(["address", "string"], [from_address, "s"])
        assert solidity_keccak256(["address", "string"], [from_address, "s"]) == keccak256(packed)

    def test_hash_pair_order_sensitive(self) -> None:
        a = keccak256(b"a")
        b = keccak256(b"b")
        assert hash_pair(a, b) != hash_pair(b, a)
        assert hash_pair(a, b) == keccak256(hex_to_bytes(a) + hex_to_bytes(b))


class TestAmountEncryption:

    def test_round_trip(self) -> None:
        encrypted = encrypt_amount("100", "secret1", FAST)
        assert decrypt_amount(encrypted, "secret1", FAST) == "100"

    def test_layout(self) -> None:
        encrypted = encrypt_amount("100", "secret1", FAST)
        # iv (12) + ciphertext (3) + tag (16)
        assert len(hex_to_bytes(encrypted)) == 12 + 3 + 16

    def test_random_iv(self) -> None:
        assert encrypt_amount("100", "s", FAST) != encrypt_amount("100", "s", FAST)

    def test_wrong_secret(self) -> None:
        encrypted = encrypt_amount("100", "secret1", FAST)
        with pytest.raises(DecryptionError):
            decrypt_amount(encrypted, "wrong-secret", FAST)

    def test_corrupted_ciphertext(self) -> None:
        raw = bytearray(hex_to_bytes(encrypt_amount("100", "secret1", FAST)))
        raw[-1] ^= 0x01
        with pytest.raises(DecryptionError):
            decrypt_amount("0x" + raw.hex(), "secret1", FAST)

    def test_malformed_input(self) -> None:
        with pytest.raises(DecryptionError):
            decrypt_amount("0xzz", "secret1", FAST)
        with pytest.raises(DecryptionError):
            decrypt_amount("0x0102", "secret1", FAST)

    def test_default_key_derivation(self) -> None:
        encrypted = encrypt_amount("7", "secret1")
        assert decrypt_amount(encrypted, "secret1") == "7"
        with pytest.raises(DecryptionError):
            decrypt_amount(encrypted, "secret1", FAST)


class TestSecrets:

    def test_random_secret(self) -> None:
        secret = generate_random_secret()
        assert len(secret) == 66
        assert secret != generate_random_secret()

    def test_hash_secret(self) -> None:
        assert hash_secret("secret1") == keccak256(b"secret1")


class TestEnvelope:

    def test_package_shape(self) -> None:
        package = json.loads(encrypt_data("payload", "pubkey"))
        assert set(package) == {"encrypted", "wrappedKey"}
        assert len(package["wrappedKey"]) == 66

    def test_wrapped_key_cannot_be_reopened(self) -> None:
        with pytest.raises(DecryptionError):
            decrypt_data(encrypt_data("payload", "pubkey"), "privkey")

    def test_malformed_package(self) -> None:
        with pytest.raises(DecryptionError):
            decrypt_data("not json", "privkey")
