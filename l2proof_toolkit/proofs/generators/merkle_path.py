"""
Merkle sibling paths for State Commitment Chain batches.

Leaves are the batch's state roots in submission order and parents are
keccak(left . right). A level with an odd number of nodes promotes its last
node unchanged: it is neither duplicated nor paired with padding, and no
sibling is emitted for it.
"""

from typing import List, Sequence

from eth_utils import keccak

from l2proof_toolkit.utils.blockchain import HexLike, to_bytes32


def _hash_pair(left: bytes, right: bytes) -> bytes:
    return keccak(left + right)


def _next_level(level: List[bytes]) -> List[bytes]:
    parents = [
        _hash_pair(level[i], level[i + 1]) for i in range(0, len(level) - 1, 2)
    ]
    if len(level) % 2 == 1:
        parents.append(level[-1])
    return parents


def _check_index(leaf_count: int, index: int) -> None:
    if leaf_count == 0:
        raise ValueError("Cannot build a Merkle tree without leaves")
    if not 0 <= index < leaf_count:
        raise ValueError(
            f"Leaf index {index} out of range for {leaf_count} leaves"
        )


def compute_merkle_root(leaves: Sequence[HexLike]) -> bytes:
    """Compute the root of a batch's state root tree."""
    if not leaves:
        raise ValueError("Cannot build a Merkle tree without leaves")
    level = [to_bytes32(leaf) for leaf in leaves]
    while len(level) > 1:
        level = _next_level(level)
    return level[0]


def build_sibling_path(
    batch_state_roots: Sequence[HexLike], index_within_batch: int
) -> List[bytes]:
    """
    Build the sibling path proving a state root's position in its batch.

    Args:
        batch_state_roots: All state roots of the batch, in submission order.
        index_within_batch: Position of the proven state root.

    Returns:
        List[bytes]: Siblings from the leaf level up to (excluding) the root.
    """
    _check_index(len(batch_state_roots), index_within_batch)

    level = [to_bytes32(root) for root in batch_state_roots]
    position = index_within_batch
    siblings: List[bytes] = []

    while len(level) > 1:
        sibling_position = position ^ 1
        if sibling_position < len(level):
            siblings.append(level[sibling_position])
        level = _next_level(level)
        position //= 2

    return siblings


def compute_root_from_path(
    leaf: HexLike,
    index: int,
    siblings: Sequence[HexLike],
    leaf_count: int,
) -> bytes:
    """
    Recompute the batch root from a leaf and its sibling path.

    leaf_count is required to know on which levels the node was promoted
    without a sibling.
    """
    _check_index(leaf_count, index)

    node = to_bytes32(leaf)
    position = index
    width = leaf_count
    remaining = [to_bytes32(sibling) for sibling in siblings]

    while width > 1:
        if position ^ 1 < width:
            if not remaining:
                raise ValueError("Sibling path is too short")
            sibling = remaining.pop(0)
            if position % 2 == 0:
                node = _hash_pair(node, sibling)
            else:
                node = _hash_pair(sibling, node)
        position //= 2
        width = (width + 1) // 2

    if remaining:
        raise ValueError("Sibling path is too long")
    return node


def verify_sibling_path(
    leaf: HexLike,
    index: int,
    siblings: Sequence[HexLike],
    leaf_count: int,
    expected_root: HexLike,
) -> bool:
    return compute_root_from_path(
        leaf, index, siblings, leaf_count
    ) == to_bytes32(expected_root)
