"""Pytest configuration and shared fixtures for the x402 payment core tests."""

import pytest

from config.config import EncryptionConfig, ProtocolConfig
from x402_protocol import X402Protocol

FROM_ADDRESS = "0x" + "11" * 20
TO_ADDRESS = "0x" + "22" * 20


@pytest.fixture
def from_address() -> str:
    return FROM_ADDRESS


@pytest.fixture
def to_address() -> str:
    return TO_ADDRESS


@pytest.fixture
def fast_config() -> ProtocolConfig:
    """Protocol config with a cheap key derivation for bulk tests."""
    return ProtocolConfig(encryption_config=EncryptionConfig(pbkdf2_iterations=1000))


@pytest.fixture
def protocol(fast_config) -> X402Protocol:
    return X402Protocol(fast_config)
