"""Hashing and encryption collaborators: Keccak packing and AES-GCM amounts."""

from .keyed_hash import (
    ZERO_HASH,
    HASH_SIZE,
    keccak256,
    solidity_packed,
    solidity_keccak256,
    hash_pair,
    hex_to_bytes,
    bytes_to_hex,
)
from .encryption import (
    DecryptionError,
    encrypt_amount,
    decrypt_amount,
    generate_random_secret,
    hash_secret,
    encrypt_data,
    decrypt_data,
)

__all__ = [
    'ZERO_HASH',
    'HASH_SIZE',
    'keccak256',
    'solidity_packed',
    'solidity_keccak256',
    'hash_pair',
    'hex_to_bytes',
    'bytes_to_hex',
    'DecryptionError',
    'encrypt_amount',
    'decrypt_amount',
    'generate_random_secret',
    'hash_secret',
    'encrypt_data',
    'decrypt_data',
]
