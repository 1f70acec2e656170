from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

import yaml

logger = logging.getLogger(__name__)


@dataclass
class PoseidonConfig:
    t: int = 6
    n_rounds_f: int = 8
    n_rounds_p: int = 57

    def __post_init__(self):
        if self.n_rounds_f % 2:
            raise ValueError("n_rounds_f must be even")
        if self.t < 2:
            raise ValueError("Poseidon width must be at least 2")


@dataclass
class EncryptionConfig:
    pbkdf2_iterations: int = 100000
    salt: str = "x402-zk-snark-salt"
    iv_length: int = 12


@dataclass
class ZKConfig:
    protocol: str = "groth16"
    curve: str = "bn128"
    poseidon: PoseidonConfig = field(default_factory=PoseidonConfig)


@dataclass
class ProtocolConfig:
    # Upper bound accepted by the amount range constraint (uint256)
    max_amount: int = 2 ** 256 - 1
    validate_circuit: bool = True

    zk_config: ZKConfig = field(default_factory=ZKConfig)
    encryption_config: EncryptionConfig = field(default_factory=EncryptionConfig)

    log_dir: Path = field(default_factory=lambda: Path("logs"))
    log_level: str = "INFO"
    results_dir: Path = field(default_factory=lambda: Path("results"))
    enable_benchmarking: bool = False

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        self.results_dir = Path(self.results_dir)


def load_config(config_path: Optional[Path] = None) -> ProtocolConfig:
    """Load configuration from file or return default"""
    if config_path is None:
        config_path = Path("config.yaml")
    config_path = Path(config_path)

    if not config_path.exists():
        return ProtocolConfig()

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    zk_data = config_data.get('zk_proofs', {})
    poseidon_data = zk_data.get('poseidon', {})
    zk_config = ZKConfig(
        protocol=zk_data.get('protocol', 'groth16'),
        curve=zk_data.get('curve', 'bn128'),
        poseidon=PoseidonConfig(
            t=poseidon_data.get('t', 6),
            n_rounds_f=poseidon_data.get('n_rounds_f', 8),
            n_rounds_p=poseidon_data.get('n_rounds_p', 57)
        )
    )

    enc_data = config_data.get('encryption', {})
    encryption_config = EncryptionConfig(
        pbkdf2_iterations=enc_data.get('pbkdf2_iterations', 100000),
        salt=enc_data.get('salt', 'x402-zk-snark-salt'),
        iv_length=enc_data.get('iv_length', 12)
    )

    logger.info(f"Loaded configuration from {config_path}")

    return ProtocolConfig(
        max_amount=int(config_data.get('max_amount', 2 ** 256 - 1)),
        validate_circuit=config_data.get('validate_circuit', True),
        zk_config=zk_config,
        encryption_config=encryption_config,
        log_dir=Path(config_data.get('log_dir', 'logs')),
        log_level=config_data.get('log_level', 'INFO'),
        results_dir=Path(config_data.get('results_dir', 'results')),
        enable_benchmarking=config_data.get('enable_benchmarking', False)
    )


def save_config(config: ProtocolConfig, config_path: Optional[Path] = None):
    """Save configuration to YAML file"""
    if config_path is None:
        config_path = Path("config.yaml")

    config_data = {
        # Stored as a string: YAML ints are not guaranteed 256-bit safe
        'max_amount': str(config.max_amount),
        'validate_circuit': config.validate_circuit,
        'zk_proofs': {
            'protocol': config.zk_config.protocol,
            'curve': config.zk_config.curve,
            'poseidon': {
                't': config.zk_config.poseidon.t,
                'n_rounds_f': config.zk_config.poseidon.n_rounds_f,
                'n_rounds_p': config.zk_config.poseidon.n_rounds_p
            }
        },
        'encryption': {
            'pbkdf2_iterations': config.encryption_config.pbkdf2_iterations,
            'salt': config.encryption_config.salt,
            'iv_length': config.encryption_config.iv_length
        },
        'log_dir': str(config.log_dir),
        'log_level': config.log_level,
        'results_dir': str(config.results_dir),
        'enable_benchmarking': config.enable_benchmarking
    }

    with open(config_path, 'w') as f:
        yaml.dump(config_data, f, default_flow_style=False)

    logger.info(f"Saved configuration to {config_path}")
