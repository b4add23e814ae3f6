"""
Unit tests for batch Merkle sibling paths.
"""

import pytest
from eth_utils import keccak

from l2proof_toolkit.proofs.generators.merkle_path import (
    build_sibling_path,
    compute_merkle_root,
    compute_root_from_path,
    verify_sibling_path,
)


def _leaves(count):
    return [keccak(text=f"state-root-{i}") for i in range(count)]


def _h(left, right):
    return keccak(left + right)


class TestSiblingPath:
    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 6, 7, 8, 9, 16, 17])
    def test_every_leaf_recomputes_root(self, count):
        leaves = _leaves(count)
        root = compute_merkle_root(leaves)

        for index, leaf in enumerate(leaves):
            siblings = build_sibling_path(leaves, index)
            assert compute_root_from_path(leaf, index, siblings, count) == root
            assert verify_sibling_path(leaf, index, siblings, count, root)

    def test_single_leaf_is_root(self):
        (leaf,) = _leaves(1)
        assert compute_merkle_root([leaf]) == leaf
        assert build_sibling_path([leaf], 0) == []

    def test_odd_level_promotes_last_node(self):
        """The unpaired leaf is promoted, never duplicated or padded."""
        a, b, c = _leaves(3)

        assert compute_merkle_root([a, b, c]) == _h(_h(a, b), c)
        assert build_sibling_path([a, b, c], 0) == [b, c]
        assert build_sibling_path([a, b, c], 2) == [_h(a, b)]

    def test_five_leaves(self):
        a, b, c, d, e = _leaves(5)
        expected = _h(_h(_h(a, b), _h(c, d)), e)

        assert compute_merkle_root([a, b, c, d, e]) == expected
        assert build_sibling_path([a, b, c, d, e], 4) == [_h(_h(a, b), _h(c, d))]
        assert build_sibling_path([a, b, c, d, e], 3) == [c, _h(a, b), e]

    def test_wrong_leaf_does_not_verify(self):
        leaves = _leaves(6)
        root = compute_merkle_root(leaves)
        siblings = build_sibling_path(leaves, 2)

        assert not verify_sibling_path(leaves[3], 2, siblings, 6, root)

    def test_accepts_hex_strings(self):
        leaves = _leaves(4)
        hex_leaves = ["0x" + leaf.hex() for leaf in leaves]

        assert build_sibling_path(hex_leaves, 1) == build_sibling_path(leaves, 1)


class TestErrors:
    def test_empty_batch(self):
        with pytest.raises(ValueError, match="without leaves"):
            build_sibling_path([], 0)
        with pytest.raises(ValueError):
            compute_merkle_root([])

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_index_out_of_range(self, index):
        with pytest.raises(ValueError, match="out of range"):
            build_sibling_path(_leaves(3), index)

    def test_path_length_mismatch(self):
        leaves = _leaves(4)
        siblings = build_sibling_path(leaves, 0)

        with pytest.raises(ValueError, match="too short"):
            compute_root_from_path(leaves[0], 0, siblings[:1], 4)
        with pytest.raises(ValueError, match="too long"):
            compute_root_from_path(leaves[0], 0, siblings + [leaves[1]], 4)
