"""
Groth16-Shaped Proof Construction and Verification
Structural stand-in: witness values are embedded positionally in the curve-point
fields and pi_c[1] carries a Poseidon binding tag over pi_a[0..1]. There is no
pairing check and no trusted setup, so the proof gives no soundness or
zero-knowledge guarantee.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from cipher.encryption import hash_secret
from config.config import ZKConfig
from utils.utils import parse_big_int
from .poseidon import PoseidonHash, PoseidonParams

logger = logging.getLogger(__name__)

# ============================================================================
# EXCEPTIONS
# ============================================================================


class ZKError(Exception):
    """Base exception for ZK operations"""
    pass


class ProofGenerationError(ZKError):
    """Proof generation failed"""
    pass


# ============================================================================
# PROOF DATA STRUCTURES
# ============================================================================


@dataclass
class Proof:
    """Groth16-shaped proof: pi_a (3), pi_b (3x2), pi_c (3)"""
    pi_a: List[str]
    pi_b: List[List[str]]
    pi_c: List[str]
    protocol: str = "groth16"
    curve: str = "bn128"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'pi_a': list(self.pi_a),
            'pi_b': [list(pair) for pair in self.pi_b],
            'pi_c': list(self.pi_c),
            'protocol': self.protocol,
            'curve': self.curve,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_json(cls, proof_str: str) -> 'Proof':
        data = json.loads(proof_str)
        if not isinstance(data, dict):
            raise ValueError("Proof JSON must be an object")
        return cls(
            pi_a=data['pi_a'],
            pi_b=data['pi_b'],
            pi_c=data['pi_c'],
            protocol=data.get('protocol', ''),
            curve=data.get('curve', ''),
        )


@dataclass
class ProofInput:
    """Private payment inputs; each present field adds one witness entry.

    Witness order: 1, amount, nullifier, commitment, keccak(secret), from, to.
    """
    amount: Optional[int] = None
    nullifier: Optional[str] = None
    commitment: Optional[str] = None
    secret: Optional[str] = None
    from_address: Optional[str] = None
    to_address: Optional[str] = None

    def witness(self) -> List[int]:
        witness = [1]

        if self.amount is not None:
            witness.append(parse_big_int(self.amount))
        if self.nullifier:
            witness.append(parse_big_int(self.nullifier))
        if self.commitment:
            witness.append(parse_big_int(self.commitment))
        if self.secret:
            witness.append(parse_big_int(hash_secret(self.secret)))
        if self.from_address:
            witness.append(parse_big_int(self.from_address))
        if self.to_address:
            witness.append(parse_big_int(self.to_address))

        return witness


@dataclass
class BatchProofInput:
    """Batch inputs: witness is 1, root, then (commitment, nullifier) per transaction"""
    merkle_root: str
    transactions: List[Tuple[str, str]] = field(default_factory=list)

    def witness(self) -> List[int]:
        witness = [1, parse_big_int(self.merkle_root)]
        for commitment, nullifier in self.transactions:
            witness.append(parse_big_int(commitment))
            witness.append(parse_big_int(nullifier))
        return witness


@dataclass
class VerificationResult:
    valid: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> 'VerificationResult':
        return cls(True)

    @classmethod
    def invalid(cls, reason: str) -> 'VerificationResult':
        return cls(False, reason)

    def __bool__(self) -> bool:
        return self.valid


# ============================================================================
# PROVER / VERIFIER
# ============================================================================


class ZKSnarkProver:
    """Builds and checks the stand-in proof object"""

    def __init__(self, config: Optional[ZKConfig] = None, hasher: Optional[PoseidonHash] = None):
        self.config = config or ZKConfig()
        self.poseidon = hasher or PoseidonHash(PoseidonParams.from_config(self.config.poseidon))

    def create_proof(self, witness: Sequence[int]) -> Proof:
        def w(i: int) -> str:
            return str(witness[i]) if i < len(witness) else '0'

        # Missing witness slots hash exactly like zeros in state[1..]
        binding_tag = self.poseidon.hash(list(witness[1:3]))

        return Proof(
            pi_a=[w(1), w(2), '1'],
            pi_b=[
                [w(3), w(4)],
                [w(5), w(6)],
                ['1', '0'],
            ],
            pi_c=[str(witness[0]) if witness else '1', str(binding_tag), '1'],
            protocol=self.config.protocol,
            curve=self.config.curve,
        )

    def generate_proof(self, inputs) -> str:
        """Serialize a proof over a ProofInput or BatchProofInput witness"""
        try:
            witness = inputs.witness()
        except (ValueError, TypeError) as e:
            raise ProofGenerationError(f"Invalid proof input: {e}") from e

        proof = self.create_proof(witness)
        logger.debug(f"Generated proof over {len(witness)} witness values")
        return proof.to_json()

    def check_proof(self, proof_str: str, public_inputs: Sequence[str]) -> VerificationResult:
        """Total verification returning the failure reason"""
        try:
            try:
                proof = Proof.from_json(proof_str)
            except (ValueError, KeyError, TypeError):
                return VerificationResult.invalid("malformed proof JSON")

            if proof.protocol != self.config.protocol:
                return VerificationResult.invalid(f"unexpected protocol {proof.protocol!r}")

            if not (isinstance(proof.pi_a, list) and len(proof.pi_a) == 3):
                return VerificationResult.invalid("pi_a must have 3 elements")
            if not (isinstance(proof.pi_b, list) and len(proof.pi_b) == 3
                    and all(isinstance(p, list) and len(p) == 2 for p in proof.pi_b)):
                return VerificationResult.invalid("pi_b must be 3x2")
            if not (isinstance(proof.pi_c, list) and len(proof.pi_c) == 3):
                return VerificationResult.invalid("pi_c must have 3 elements")

            computed_hash = self.poseidon.hash([
                parse_big_int(proof.pi_a[0]),
                parse_big_int(proof.pi_a[1]),
            ])
            if computed_hash != parse_big_int(proof.pi_c[1]):
                return VerificationResult.invalid("binding hash mismatch")

            if not all(parse_big_int(value) > 0 for value in public_inputs):
                return VerificationResult.invalid("public inputs must be positive")

            return VerificationResult.ok()

        except Exception as e:
            logger.warning(f"Proof verification error: {e}")
            return VerificationResult.invalid(str(e))

    def verify_proof(self, proof_str: str, public_inputs: Sequence[str]) -> bool:
        result = self.check_proof(proof_str, public_inputs)
        if not result.valid:
            logger.info(f"Proof rejected: {result.reason}")
        return result.valid


def generate_proof(inputs, config: Optional[ZKConfig] = None) -> str:
    return ZKSnarkProver(config).generate_proof(inputs)


def verify_proof(proof_str: str, public_inputs: Sequence[str], config: Optional[ZKConfig] = None) -> bool:
    return ZKSnarkProver(config).verify_proof(proof_str, public_inputs)
