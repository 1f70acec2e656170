"""Configuration management for the x402 payment core."""

from .config import (
    ProtocolConfig, ZKConfig, PoseidonConfig, EncryptionConfig, load_config, save_config
)

__all__ = ['ProtocolConfig', 'ZKConfig', 'PoseidonConfig', 'EncryptionConfig',
           'load_config', 'save_config']
