"""
Zero-Knowledge Proof Module for the x402 Private Payment Core
Poseidon permutation hash, payment constraint circuit and Groth16-shaped proofs
"""

from .poseidon import PoseidonHash, PoseidonParams, poseidon_hash
from .payment_circuit import (
    PaymentCircuit,
    Constraint,
    CircuitError,
    SignalNotFoundError,
    RangeConstraintError,
    MultiplicationConstraintError,
)
from .zk_proofs import (
    # Core classes
    ZKSnarkProver,
    Proof,
    ProofInput,
    BatchProofInput,
    VerificationResult,

    # Functions
    generate_proof,
    verify_proof,

    # Exceptions
    ZKError,
    ProofGenerationError,
)

__version__ = "1.0.0"

__all__ = [
    # Classes
    'PoseidonHash',
    'PoseidonParams',
    'PaymentCircuit',
    'Constraint',
    'ZKSnarkProver',
    'Proof',
    'ProofInput',
    'BatchProofInput',
    'VerificationResult',

    # Functions
    'poseidon_hash',
    'generate_proof',
    'verify_proof',

    # Exceptions
    'ZKError',
    'ProofGenerationError',
    'CircuitError',
    'SignalNotFoundError',
    'RangeConstraintError',
    'MultiplicationConstraintError',
]
