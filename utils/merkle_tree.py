"""
Binary Merkle Tree over 32-byte leaves

Leaves are right-padded with ZERO_HASH up to 2^depth. Each layer is built by
hashing adjacent siblings (left || right) with Keccak-256; an odd trailing node
is paired with itself. Every mutation rebuilds the whole pyramid.
"""

import logging
from typing import List, Optional, Tuple

from cipher.keyed_hash import ZERO_HASH, hash_pair

logger = logging.getLogger(__name__)


class MerkleTreeError(IndexError):
    """Leaf or layer index outside the tree"""
    pass


def _depth_for(leaf_count: int) -> int:
    """ceil(log2(n)) with a minimum of 1"""
    return max(1, (leaf_count - 1).bit_length())


class MerkleTree:
    """Keccak Merkle tree with full rebuild on mutation.

    An explicit depth must hold every initial leaf; add_leaf grows the depth
    once the padded width is exceeded.
    """

    def __init__(self, leaves: List[str], depth: Optional[int] = None):
        self.leaves: List[str] = list(leaves)
        required = _depth_for(len(self.leaves))
        if depth is None:
            depth = required
        elif depth < required:
            raise MerkleTreeError(
                f"Depth {depth} cannot hold {len(self.leaves)} leaves (need {required})")
        self.depth = depth
        self.layers: List[List[str]] = []
        self._build_tree()

    def _build_tree(self):
        # Grow when appended leaves no longer fit the padded width
        if len(self.leaves) > 2 ** self.depth:
            self.depth = _depth_for(len(self.leaves))

        current_layer = list(self.leaves)
        current_layer.extend([ZERO_HASH] * (2 ** self.depth - len(current_layer)))

        self.layers = [current_layer]

        while len(current_layer) > 1:
            next_layer = []
            for i in range(0, len(current_layer), 2):
                left = current_layer[i]
                right = current_layer[i + 1] if i + 1 < len(current_layer) else left
                next_layer.append(hash_pair(left, right))

            self.layers.append(next_layer)
            current_layer = next_layer

        logger.debug(
            f"Built Merkle tree: {len(self.leaves)} leaves, depth {self.depth}")

    def _check_index(self, index: int):
        if index < 0 or index >= len(self.leaves):
            raise MerkleTreeError(
                f"Index {index} out of bounds for {len(self.leaves)} leaves")

    def get_root(self) -> str:
        return self.layers[-1][0]

    def _walk(self, index: int) -> List[Tuple[str, bool]]:
        """(sibling, queried node is a right child) from leaf to root"""
        self._check_index(index)

        path = []
        current_index = index
        for layer in self.layers[:-1]:
            is_right_node = current_index % 2 == 1
            sibling_index = current_index ^ 1
            # Odd trailing node was hashed with itself
            if sibling_index < len(layer):
                sibling = layer[sibling_index]
            else:
                sibling = layer[current_index]
            path.append((sibling, is_right_node))
            current_index //= 2

        return path

    def get_proof(self, index: int) -> List[str]:
        return [sibling for sibling, _ in self._walk(index)]

    def get_proof_with_positions(self, index: int) -> Tuple[List[str], List[bool]]:
        path = self._walk(index)
        return [s for s, _ in path], [is_right for _, is_right in path]

    @staticmethod
    def verify_proof(leaf: str, proof: List[str], root: str, index: int) -> bool:
        """Recompute the path using index parity for sibling order"""
        current_hash = leaf
        current_index = index

        for proof_element in proof:
            if current_index % 2 == 0:
                current_hash = hash_pair(current_hash, proof_element)
            else:
                current_hash = hash_pair(proof_element, current_hash)
            current_index //= 2

        return current_hash.lower() == root.lower()

    @staticmethod
    def verify_proof_with_positions(
        leaf: str, proof: List[str], positions: List[bool], root: str
    ) -> bool:
        """Recompute the path trusting the recorded position flags"""
        if len(proof) != len(positions):
            return False

        current_hash = leaf
        for proof_element, is_right in zip(proof, positions):
            if is_right:
                current_hash = hash_pair(proof_element, current_hash)
            else:
                current_hash = hash_pair(current_hash, proof_element)

        return current_hash.lower() == root.lower()

    def add_leaf(self, leaf: str) -> int:
        self.leaves.append(leaf)
        self._build_tree()
        return len(self.leaves) - 1

    def update_leaf(self, index: int, new_leaf: str):
        self._check_index(index)
        self.leaves[index] = new_leaf
        self._build_tree()

    def get_leaves(self) -> List[str]:
        return list(self.leaves)

    def get_depth(self) -> int:
        return self.depth

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    def get_layer(self, layer_index: int) -> List[str]:
        if layer_index < 0 or layer_index >= len(self.layers):
            raise MerkleTreeError(f"Layer index {layer_index} out of bounds")
        return list(self.layers[layer_index])
