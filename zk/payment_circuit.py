"""
Payment Circuit - minimal rank-1 constraint system over named signals

Constraints snapshot signal values at the moment they are recorded.
verify_circuit() replays the recorded triples and checks
(sum A) * (sum B) == sum C over unbounded integers.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from cipher.keyed_hash import solidity_keccak256
from utils.field_math import field_array

logger = logging.getLogger(__name__)

ONE_SIGNAL = "one"


class CircuitError(Exception):
    """Base exception for circuit construction"""
    pass


class SignalNotFoundError(CircuitError, KeyError):
    """Referenced signal was never set"""
    pass


class RangeConstraintError(CircuitError):
    """Signal value outside the requested range"""
    pass


class MultiplicationConstraintError(CircuitError):
    """out != a * b at recording time"""
    pass


@dataclass
class Constraint:
    """One rank-1 relation (sum A) * (sum B) = (sum C)"""
    A: List[int]
    B: List[int]
    C: List[int]

    def is_satisfied(self) -> bool:
        return sum(self.A) * sum(self.B) == sum(self.C)


class PaymentCircuit:
    """Signal store plus constraint log for the private payment relation"""

    def __init__(self):
        self.signals: Dict[str, int] = {}
        self.constraints: List[Constraint] = []
        self._initialize_circuit()

    def _initialize_circuit(self):
        self.signals[ONE_SIGNAL] = 1

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------

    def set_signal(self, name: str, value: int):
        self.signals[name] = value

    def get_signal(self, name: str) -> Optional[int]:
        return self.signals.get(name)

    def _require_signal(self, name: str) -> int:
        value = self.signals.get(name)
        if value is None:
            raise SignalNotFoundError(f"Signal {name} not found")
        return value

    # ------------------------------------------------------------------
    # Constraints
    # ------------------------------------------------------------------

    def define_constraint(self, A: List[int], B: List[int], C: List[int]):
        # Vectors are reduced to scalar sums, so lengths may differ
        self.constraints.append(Constraint(list(A), list(B), list(C)))

    @staticmethod
    def verify_range_proof(value: int, min_value: int, max_value: int) -> bool:
        return min_value <= value <= max_value

    def add_range_constraint(self, signal: str, min_value: int, max_value: int):
        value = self._require_signal(signal)

        if not self.verify_range_proof(value, min_value, max_value):
            raise RangeConstraintError(
                f"Signal {signal} is out of range [{min_value}, {max_value}]")

        self.define_constraint([value], [1], [value])

    def add_equality_constraint(self, signal1: str, signal2: str):
        # Inequality is only detected by verify_circuit
        value1 = self._require_signal(signal1)
        value2 = self._require_signal(signal2)

        self.define_constraint([value1], [1], [value2])

    def add_multiplication_constraint(self, signal1: str, signal2: str, result_signal: str):
        value1 = self._require_signal(signal1)
        value2 = self._require_signal(signal2)
        result = self._require_signal(result_signal)

        if value1 * value2 != result:
            raise MultiplicationConstraintError(
                f"Multiplication constraint failed: {signal1} * {signal2} != {result_signal}")

        self.define_constraint([value1], [value2], [result])

    def verify_circuit(self) -> bool:
        try:
            for index, constraint in enumerate(self.constraints):
                if not constraint.is_satisfied():
                    logger.debug(f"Constraint {index} not satisfied")
                    return False
            return True
        except Exception as e:
            logger.error(f"Circuit verification failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Witness
    # ------------------------------------------------------------------

    def generate_witness(self) -> List[int]:
        """Signal values in insertion order"""
        return list(self.signals.values())

    def generate_field_witness(self):
        """Witness reduced into the scalar field as a galois array"""
        return field_array(self.generate_witness())

    def reset(self):
        self.signals.clear()
        self.constraints = []
        self._initialize_circuit()

    # ------------------------------------------------------------------
    # Payment relation
    # ------------------------------------------------------------------

    @staticmethod
    def compute_commitment(recipient: str, amount: int, nullifier: str) -> int:
        digest = solidity_keccak256(
            ["address", "uint256", "bytes32"], [recipient, amount, nullifier])
        return int(digest, 16)

    @staticmethod
    def compute_nullifier(address: str, secret: str) -> int:
        digest = solidity_keccak256(["address", "string"], [address, secret])
        return int(digest, 16)

    def constrain_payment(
        self,
        sender: str,
        recipient: str,
        amount: int,
        secret: str,
        nullifier: str,
        commitment: str,
        max_amount: int = 2 ** 256 - 1
    ) -> bool:
        """Load a payment into the circuit and check it.

        Binds the published nullifier/commitment to values recomputed from
        the private inputs and bounds the amount to [0, max_amount].
        Raises RangeConstraintError for an out-of-range amount.
        """
        self.set_signal("amount", amount)
        self.add_range_constraint("amount", 0, max_amount)

        self.set_signal("nullifier", int(nullifier, 16))
        self.set_signal("commitment", int(commitment, 16))

        computed_nullifier = self.compute_nullifier(sender, secret)
        self.set_signal("computed_nullifier", computed_nullifier)
        self.set_signal(
            "computed_commitment",
            self.compute_commitment(recipient, amount, nullifier))

        self.add_equality_constraint("computed_nullifier", "nullifier")
        self.add_equality_constraint("computed_commitment", "commitment")

        return self.verify_circuit()
