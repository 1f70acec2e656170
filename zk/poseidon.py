"""
Poseidon-shaped permutation hash over the BN128 scalar field

Width t=6 sponge with 8 full rounds (split 4/4) around 57 partial rounds.
The round constants and mixing matrix follow a fixed simplified derivation
(not the circomlib tables), so outputs only match hashes produced by the
same derivation.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from config.config import PoseidonConfig
from utils.field_math import FIELD_SIZE, mod

logger = logging.getLogger(__name__)

# Round constant i is (i + 1) * ROUND_CONSTANT_BASE
ROUND_CONSTANT_BASE = 0x30644e72e131a029b85045b68181585d


@dataclass(frozen=True)
class PoseidonParams:
    t: int = 6
    n_rounds_f: int = 8
    n_rounds_p: int = 57

    @classmethod
    def from_config(cls, config: PoseidonConfig) -> 'PoseidonParams':
        return cls(t=config.t, n_rounds_f=config.n_rounds_f, n_rounds_p=config.n_rounds_p)

    @property
    def total_rounds(self) -> int:
        return self.n_rounds_f + self.n_rounds_p


def pow5(x: int) -> int:
    """S-box x^5 mod p"""
    x2 = (x * x) % FIELD_SIZE
    x4 = (x2 * x2) % FIELD_SIZE
    return (x4 * x) % FIELD_SIZE


class PoseidonHash:
    """Stateless permutation hash; constants are derived once per instance"""

    def __init__(self, params: Optional[PoseidonParams] = None):
        self.params = params or PoseidonParams()
        self.t = self.params.t
        self.round_constants = self._generate_round_constants()
        self.mds_matrix = self._generate_mix_matrix()

    def _generate_round_constants(self) -> List[int]:
        count = self.params.total_rounds * self.t
        return [(i + 1) * ROUND_CONSTANT_BASE for i in range(count)]

    def _generate_mix_matrix(self) -> List[List[int]]:
        return [[(i + 1) * (j + 1) for j in range(self.t)] for i in range(self.t)]

    def ark(self, state: List[int], round_index: int) -> List[int]:
        """Add round constants"""
        offset = round_index * self.t
        return [mod(state[i] + self.round_constants[offset + i]) for i in range(self.t)]

    def sbox(self, state: List[int], full_round: bool) -> List[int]:
        if full_round:
            return [pow5(x) for x in state]
        return [pow5(state[0])] + state[1:]

    def mix(self, state: List[int]) -> List[int]:
        new_state = [0] * self.t
        for i in range(self.t):
            row = self.mds_matrix[i]
            for j in range(self.t):
                new_state[i] = mod(new_state[i] + mod(row[j] * state[j]))
        return new_state

    def permute(self, state: List[int]) -> List[int]:
        half_rounds_f = self.params.n_rounds_f // 2
        round_index = 0

        for _ in range(half_rounds_f):
            state = self.mix(self.sbox(self.ark(state, round_index), True))
            round_index += 1

        for _ in range(self.params.n_rounds_p):
            state = self.mix(self.sbox(self.ark(state, round_index), False))
            round_index += 1

        for _ in range(half_rounds_f):
            state = self.mix(self.sbox(self.ark(state, round_index), True))
            round_index += 1

        return state

    def hash(self, inputs: Sequence[int]) -> int:
        """Absorb up to t-1 inputs into state[1:], permute, squeeze state[0].

        Inputs past t-1 are ignored; every input is reduced mod p first.
        """
        state = [0] * self.t
        for i, value in enumerate(list(inputs)[:self.t - 1]):
            state[i + 1] = mod(int(value))

        return self.permute(state)[0]

    def __call__(self, inputs: Sequence[int]) -> int:
        return self.hash(inputs)


def poseidon_hash(inputs: Sequence[int], params: Optional[PoseidonParams] = None) -> int:
    """One-shot hash with a freshly constructed instance"""
    return PoseidonHash(params).hash(inputs)
