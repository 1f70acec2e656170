#!/usr/bin/env python3
"""
x402 Private Payment Protocol
=============================
Combines nullifier/commitment derivation, amount encryption, proof assembly
and Merkle batch aggregation into the transaction-level API.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from cipher.encryption import DecryptionError, decrypt_amount, encrypt_amount
from cipher.keyed_hash import ZERO_HASH, hash_pair, solidity_keccak256
from config.config import ProtocolConfig
from utils.merkle_tree import MerkleTree, MerkleTreeError
from zk.payment_circuit import CircuitError, PaymentCircuit
from zk.zk_proofs import BatchProofInput, ProofGenerationError, ProofInput, ZKSnarkProver

logger = logging.getLogger(__name__)

# ============================================================================
# TRANSACTION DATA STRUCTURES
# ============================================================================


@dataclass
class PrivateTransaction:
    """Publicly shareable transaction; holds neither the amount nor the secret"""
    encrypted_amount: str
    proof: str
    nullifier: str
    commitment: str
    public_inputs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'encryptedAmount': self.encrypted_amount,
            'proof': self.proof,
            'nullifier': self.nullifier,
            'commitment': self.commitment,
            'publicInputs': list(self.public_inputs),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PrivateTransaction':
        return cls(
            encrypted_amount=data['encryptedAmount'],
            proof=data['proof'],
            nullifier=data['nullifier'],
            commitment=data['commitment'],
            public_inputs=list(data['publicInputs']),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, payload: str) -> 'PrivateTransaction':
        return cls.from_dict(json.loads(payload))


@dataclass
class BatchResult:
    batch_proof: str
    batch_root: str

    def to_dict(self) -> Dict[str, str]:
        return {'batchProof': self.batch_proof, 'batchRoot': self.batch_root}


# ============================================================================
# PROTOCOL
# ============================================================================


class X402Protocol:
    """Transaction-level API over the payment cryptography"""

    def __init__(self, config: Optional[ProtocolConfig] = None, prover: Optional[ZKSnarkProver] = None):
        self.config = config or ProtocolConfig()
        self.prover = prover or ZKSnarkProver(self.config.zk_config)

    # ------------------------------------------------------------------
    # Derivations
    # ------------------------------------------------------------------

    @staticmethod
    def generate_nullifier(address: str, secret: str) -> str:
        return solidity_keccak256(["address", "string"], [address, secret])

    @staticmethod
    def generate_commitment(recipient: str, amount: int, nullifier: str) -> str:
        return solidity_keccak256(
            ["address", "uint256", "bytes32"], [recipient, amount, nullifier])

    # ------------------------------------------------------------------
    # Single transactions
    # ------------------------------------------------------------------

    def _validate_circuit(self, from_address: str, to_address: str, amount: int,
                          secret: str, nullifier: str, commitment: str):
        circuit = PaymentCircuit()
        try:
            satisfied = circuit.constrain_payment(
                from_address, to_address, amount, secret, nullifier, commitment,
                max_amount=self.config.max_amount)
        except CircuitError as e:
            raise ProofGenerationError(f"Payment circuit rejected inputs: {e}") from e

        if not satisfied:
            raise ProofGenerationError("Payment circuit constraints not satisfied")

    def create_private_transaction(
        self,
        from_address: str,
        to_address: str,
        amount: int,
        secret: str
    ) -> PrivateTransaction:
        nullifier = self.generate_nullifier(from_address, secret)
        commitment = self.generate_commitment(to_address, amount, nullifier)

        if self.config.validate_circuit:
            self._validate_circuit(
                from_address, to_address, amount, secret, nullifier, commitment)

        encrypted_amount = encrypt_amount(
            str(amount), secret, self.config.encryption_config)

        proof = self.prover.generate_proof(ProofInput(
            amount=amount,
            nullifier=nullifier,
            commitment=commitment,
            secret=secret,
            from_address=from_address,
            to_address=to_address,
        ))

        logger.info(f"Created private transaction, nullifier {nullifier[:18]}...")

        return PrivateTransaction(
            encrypted_amount=encrypted_amount,
            proof=proof,
            nullifier=nullifier,
            commitment=commitment,
            public_inputs=[nullifier, commitment],
        )

    def verify_private_transaction(
        self, private_transaction: Union[PrivateTransaction, Dict[str, Any]]
    ) -> bool:
        try:
            if isinstance(private_transaction, dict):
                private_transaction = PrivateTransaction.from_dict(private_transaction)

            return self.prover.verify_proof(
                private_transaction.proof, private_transaction.public_inputs)
        except Exception as e:
            logger.error(f"Verification failed: {e}")
            return False

    def decrypt_transaction_amount(self, encrypted_amount: str, secret: str) -> int:
        decrypted = decrypt_amount(
            encrypted_amount, secret, self.config.encryption_config)
        try:
            return int(decrypted)
        except ValueError as e:
            raise DecryptionError("Decrypted payload is not an amount") from e

    # ------------------------------------------------------------------
    # Batching
    # ------------------------------------------------------------------

    def batch_transactions(self, transactions: List[PrivateTransaction]) -> BatchResult:
        commitments = [tx.commitment for tx in transactions]
        batch_root = self.compute_merkle_root(commitments)

        batch_proof = self.prover.generate_proof(BatchProofInput(
            merkle_root=batch_root,
            transactions=[(tx.commitment, tx.nullifier) for tx in transactions],
        ))

        logger.info(f"Batched {len(transactions)} transactions, root {batch_root[:18]}...")

        return BatchResult(batch_proof=batch_proof, batch_root=batch_root)

    def verify_batch(self, batch: BatchResult, transactions: List[PrivateTransaction]) -> bool:
        """Recompute the batch root and check the batch proof against it"""
        try:
            expected_root = self.compute_merkle_root([tx.commitment for tx in transactions])
            if expected_root.lower() != batch.batch_root.lower():
                logger.info("Batch root does not match transactions")
                return False

            return self.prover.verify_proof(batch.batch_proof, [batch.batch_root])
        except Exception as e:
            logger.error(f"Batch verification failed: {e}")
            return False

    @classmethod
    def compute_merkle_root(cls, leaves: List[str]) -> str:
        """Pairwise reduction; an odd trailing node is hashed with itself"""
        if not leaves:
            return ZERO_HASH
        if len(leaves) == 1:
            return leaves[0]

        new_level = []
        for i in range(0, len(leaves), 2):
            left = leaves[i]
            right = leaves[i + 1] if i + 1 < len(leaves) else left
            new_level.append(hash_pair(left, right))

        return cls.compute_merkle_root(new_level)

    @staticmethod
    def create_merkle_proof(leaves: List[str], leaf_index: int) -> List[str]:
        """Sibling path over an unpadded leaf list"""
        if leaf_index < 0 or leaf_index >= len(leaves):
            raise MerkleTreeError(
                f"Index {leaf_index} out of bounds for {len(leaves)} leaves")

        proof = []
        current_level = list(leaves)
        current_index = leaf_index

        while len(current_level) > 1:
            new_level = []

            for i in range(0, len(current_level), 2):
                left = current_level[i]
                right = current_level[i + 1] if i + 1 < len(current_level) else left

                if i == current_index:
                    proof.append(right)
                elif i + 1 == current_index:
                    proof.append(left)

                new_level.append(hash_pair(left, right))

            current_index //= 2
            current_level = new_level

        return proof

    @staticmethod
    def verify_merkle_proof(leaf: str, proof: List[str], root: str, index: int) -> bool:
        return MerkleTree.verify_proof(leaf, proof, root, index)
