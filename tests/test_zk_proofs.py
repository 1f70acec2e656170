"""Tests for proof assembly and the stand-in verifier."""

import json

import pytest

from cipher.encryption import hash_secret
from config.config import ZKConfig
from zk.poseidon import poseidon_hash
from zk.zk_proofs import (
    BatchProofInput,
    Proof,
    ProofGenerationError,
    ProofInput,
    VerificationResult,
    ZKSnarkProver,
    generate_proof,
    verify_proof,
)

PUBLIC = ["0x05", "0x06"]


@pytest.fixture(scope="module")
def prover() -> ZKSnarkProver:
    return ZKSnarkProver()


def sample_input() -> ProofInput:
    return ProofInput(amount=100, nullifier="0x05", commitment="0x06")


class TestWitness:

    def test_positional_order(self, from_address, to_address) -> None:
        inputs = ProofInput(
            amount=100, nullifier="0x05", commitment="0x06",
            secret="secret1", from_address=from_address, to_address=to_address)
        assert inputs.witness() == [
            1, 100, 5, 6,
            int(hash_secret("secret1"), 16),
            int(from_address, 16),
            int(to_address, 16),
        ]

    def test_absent_fields_omitted(self) -> None:
        assert ProofInput().witness() == [1]
        assert ProofInput(commitment="0x06").witness() == [1, 6]

    def test_zero_amount_included(self) -> None:
        assert ProofInput(amount=0).witness() == [1, 0]

    def test_batch_witness(self) -> None:
        batch = BatchProofInput("0x10", [("0x01", "0x02"), ("0x03", "0x04")])
        assert batch.witness() == [1, 16, 1, 2, 3, 4]


class TestProofAssembly:

    def test_layout(self, prover) -> None:
        proof = json.loads(prover.generate_proof(sample_input()))
        assert proof["pi_a"] == ["100", "5", "1"]
        assert proof["pi_b"] == [["6", "0"], ["0", "0"], ["1", "0"]]
        assert proof["pi_c"] == ["1", str(poseidon_hash([100, 5])), "1"]
        assert proof["protocol"] == "groth16"
        assert proof["curve"] == "bn128"

    def test_compact_serialization(self, prover) -> None:
        assert prover.generate_proof(sample_input()).startswith('{"pi_a":["100","5","1"],"pi_b"')

    def test_empty_witness_tag(self, prover) -> None:
        proof = json.loads(prover.generate_proof(ProofInput()))
        assert proof["pi_a"] == ["0", "0", "1"]
        assert proof["pi_c"][1] == str(poseidon_hash([0, 0]))

    def test_invalid_input(self, prover) -> None:
        with pytest.raises(ProofGenerationError):
            prover.generate_proof(ProofInput(nullifier="not-a-number"))

    def test_round_trip_object(self, prover) -> None:
        proof_str = prover.generate_proof(sample_input())
        assert Proof.from_json(proof_str).to_json() == proof_str

    def test_module_functions(self) -> None:
        proof_str = generate_proof(sample_input())
        assert verify_proof(proof_str, PUBLIC)


class TestVerification:

    def test_valid(self, prover) -> None:
        assert prover.verify_proof(prover.generate_proof(sample_input()), PUBLIC)
        assert prover.check_proof(prover.generate_proof(sample_input()), PUBLIC) == VerificationResult(True)

    def test_decimal_public_inputs(self, prover) -> None:
        assert prover.verify_proof(prover.generate_proof(sample_input()), ["5", "6"])

    def test_non_positive_public_input(self, prover) -> None:
        proof_str = prover.generate_proof(sample_input())
        assert not prover.verify_proof(proof_str, ["0x00", "0x06"])
        assert not prover.verify_proof(proof_str, ["-3"])

    @pytest.mark.parametrize("value", ["1_000", "+5", "0x_06"])
    def test_loose_integer_syntax_rejected(self, prover, value) -> None:
        assert not prover.verify_proof(prover.generate_proof(sample_input()), [value])

    def test_unparseable_public_input(self, prover) -> None:
        result = prover.check_proof(prover.generate_proof(sample_input()), ["xyz"])
        assert not result.valid
        assert result.reason

    def test_malformed_json(self, prover) -> None:
        result = prover.check_proof("{not json", PUBLIC)
        assert result == VerificationResult(False, "malformed proof JSON")
        assert not prover.verify_proof("[1, 2, 3]", PUBLIC)
        assert not prover.verify_proof('{"pi_a": []}', PUBLIC)

    def test_tampered_tag(self, prover) -> None:
        proof = json.loads(prover.generate_proof(sample_input()))
        proof["pi_c"][1] = str(int(proof["pi_c"][1]) + 1)
        result = prover.check_proof(json.dumps(proof), PUBLIC)
        assert result.reason == "binding hash mismatch"

    def test_tampered_pi_a(self, prover) -> None:
        proof = json.loads(prover.generate_proof(sample_input()))
        proof["pi_a"][0] = "101"
        assert not prover.verify_proof(json.dumps(proof), PUBLIC)

    def test_wrong_protocol(self, prover) -> None:
        proof = json.loads(prover.generate_proof(sample_input()))
        proof["protocol"] = "plonk"
        assert not prover.verify_proof(json.dumps(proof), PUBLIC)

    @pytest.mark.parametrize("key,value", [
        ("pi_a", ["1", "2"]),
        ("pi_b", [["1", "0"], ["1", "0"]]),
        ("pi_b", [["1"], ["1", "0"], ["1", "0"]]),
        ("pi_c", ["1", "2", "3", "4"]),
        ("pi_c", "123"),
    ])
    def test_wrong_arity(self, prover, key, value) -> None:
        proof = json.loads(prover.generate_proof(sample_input()))
        proof[key] = value
        assert not prover.verify_proof(json.dumps(proof), PUBLIC)

    def test_curve_tag_not_checked(self, prover) -> None:
        proof = json.loads(prover.generate_proof(sample_input()))
        proof["curve"] = "bls12-381"
        assert prover.verify_proof(json.dumps(proof), PUBLIC)

    def test_custom_protocol_tag(self) -> None:
        custom = ZKSnarkProver(ZKConfig(protocol="x402-standin"))
        proof_str = custom.generate_proof(sample_input())
        assert custom.verify_proof(proof_str, PUBLIC)
        assert not ZKSnarkProver().verify_proof(proof_str, PUBLIC)


class TestPackageExports:

    def test_exports_resolve(self) -> None:
        import zk
        for name in zk.__all__:
            assert hasattr(zk, name), name

    def test_proof_artifact_names(self) -> None:
        import zk
        assert {name for name in zk.__all__ if name[0].isupper()} == {
            'PoseidonHash', 'PoseidonParams', 'PaymentCircuit', 'Constraint',
            'ZKSnarkProver', 'Proof', 'ProofInput', 'BatchProofInput', 'VerificationResult',
            'ZKError', 'ProofGenerationError', 'CircuitError', 'SignalNotFoundError',
            'RangeConstraintError', 'MultiplicationConstraintError',
        }
