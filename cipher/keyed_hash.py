"""
Keccak-256 over Solidity-style tightly packed encodings.

Nullifiers, commitments and Merkle node combination all hash a packed
preimage: each value is encoded at its natural width and the encodings
are concatenated without padding or length prefixes.

    address  -> 20 raw bytes
    string   -> UTF-8 bytes
    uint256  -> 32 bytes big-endian
    bytes32  -> 32 raw bytes
"""

from typing import List, Sequence, Union

from Crypto.Hash import keccak

HASH_SIZE = 32
ADDRESS_SIZE = 20

ZERO_HASH = "0x" + "00" * HASH_SIZE

PackedValue = Union[str, int, bytes]


def hex_to_bytes(value: Union[str, bytes]) -> bytes:
    """Decode a 0x-prefixed (or bare) hex string"""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = value[2:] if value[:2] in ("0x", "0X") else value
    if len(text) % 2:
        raise ValueError(f"Hex string has odd length: {value!r}")
    return bytes.fromhex(text)


def bytes_to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def _encode(abi_type: str, value: PackedValue) -> bytes:
    if abi_type == "address":
        raw = hex_to_bytes(value)
        if len(raw) != ADDRESS_SIZE:
            raise ValueError(f"Invalid address length {len(raw)}: {value!r}")
        return raw

    if abi_type == "string":
        if not isinstance(value, str):
            raise ValueError(f"Expected str for string, got {type(value).__name__}")
        return value.encode("utf-8")

    if abi_type == "uint256":
        number = int(value)
        if number < 0 or number >= 1 << 256:
            raise ValueError(f"Value {number} does not fit in uint256")
        return number.to_bytes(32, "big")

    if abi_type == "bytes32":
        raw = hex_to_bytes(value)
        if len(raw) != HASH_SIZE:
            raise ValueError(f"Invalid bytes32 length {len(raw)}: {value!r}")
        return raw

    raise ValueError(f"Unsupported packed type: {abi_type}")


def solidity_packed(types: Sequence[str], values: Sequence[PackedValue]) -> bytes:
    """Tightly packed encoding of (type, value) pairs"""
    if len(types) != len(values):
        raise ValueError(
            f"Type/value count mismatch: {len(types)} types, {len(values)} values")
    return b"".join(_encode(t, v) for t, v in zip(types, values))


def keccak256(data: bytes) -> str:
    """Ethereum Keccak-256 as 0x-prefixed hex"""
    digest = keccak.new(digest_bits=256)
    digest.update(bytes(data))
    return "0x" + digest.hexdigest()


def solidity_keccak256(types: List[str], values: List[PackedValue]) -> str:
    return keccak256(solidity_packed(types, values))


def hash_pair(left: str, right: str) -> str:
    """Order-sensitive combination of two 32-byte nodes"""
    return solidity_keccak256(["bytes32", "bytes32"], [left, right])
