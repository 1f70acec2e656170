"""
Amount Encryption
AES-256-GCM under a PBKDF2-HMAC-SHA256 key derived from the payer's secret
"""

import json
import logging
import secrets
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from config.config import EncryptionConfig
from .keyed_hash import bytes_to_hex, hex_to_bytes, keccak256, solidity_keccak256

logger = logging.getLogger(__name__)

KEY_LENGTH = 32


class DecryptionError(Exception):
    """Wrong secret or corrupted ciphertext"""
    pass


def _derive_key(secret: str, config: EncryptionConfig) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=config.salt.encode("utf-8"),
        iterations=config.pbkdf2_iterations,
    )
    return kdf.derive(secret.encode("utf-8"))


def encrypt_amount(amount: str, secret: str, config: Optional[EncryptionConfig] = None) -> str:
    """Encrypt a plaintext string; returns hex of iv || ciphertext || tag"""
    config = config or EncryptionConfig()
    key = _derive_key(secret, config)
    iv = secrets.token_bytes(config.iv_length)

    ciphertext = AESGCM(key).encrypt(iv, amount.encode("utf-8"), None)

    return bytes_to_hex(iv + ciphertext)


def decrypt_amount(encrypted_hex: str, secret: str, config: Optional[EncryptionConfig] = None) -> str:
    """Inverse of encrypt_amount; raises DecryptionError on any authentication failure"""
    config = config or EncryptionConfig()

    try:
        combined = hex_to_bytes(encrypted_hex)
    except ValueError as e:
        raise DecryptionError("Decryption failed: Invalid secret or corrupted data") from e

    iv, ciphertext = combined[:config.iv_length], combined[config.iv_length:]
    if len(iv) != config.iv_length or not ciphertext:
        raise DecryptionError("Decryption failed: Invalid secret or corrupted data")

    key = _derive_key(secret, config)

    try:
        plaintext = AESGCM(key).decrypt(iv, ciphertext, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError) as e:
        logger.debug("AES-GCM authentication failed")
        raise DecryptionError("Decryption failed: Invalid secret or corrupted data") from e


def generate_random_secret() -> str:
    return bytes_to_hex(secrets.token_bytes(32))


def hash_secret(secret: str) -> str:
    return keccak256(secret.encode("utf-8"))


def encrypt_data(data: str, public_key: str) -> str:
    """Encrypt under a fresh secret and publish a wrapped-key package.

    The wrapped key is a one-way Keccak commitment to the secret, so the
    package can be produced but not reopened by decrypt_data.
    """
    secret = generate_random_secret()
    encrypted = encrypt_amount(data, secret)

    wrapped_key = solidity_keccak256(["string", "string"], [secret, public_key])

    return json.dumps({"encrypted": encrypted, "wrappedKey": wrapped_key})


def decrypt_data(encrypted_package: str, private_key: str) -> str:
    try:
        package = json.loads(encrypted_package)
        encrypted = package["encrypted"]
        wrapped_key = package["wrappedKey"]
    except (ValueError, KeyError, TypeError) as e:
        raise DecryptionError("Decryption failed: malformed package") from e

    recovered_secret = solidity_keccak256(["string", "string"], [wrapped_key, private_key])

    return decrypt_amount(encrypted, recovered_secret)
