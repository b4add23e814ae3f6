"""
Pytest configuration and shared fixtures.

Network capabilities are replaced by in-memory doubles: a commitment chain
holding canned batches and an L2 node answering eth_getProof from a storage
dict with trie-shaped (RLP encoded) proof nodes.
"""

from typing import Dict, List, Optional, Sequence

import pytest
import rlp
from eth_utils import keccak

from l2proof_toolkit.proofs.generators.merkle_path import compute_merkle_root
from l2proof_toolkit.proofs.generators.storage_slot import (
    derive_continuation_slots,
    encode_storage_value,
)
from l2proof_toolkit.proofs.types import StateRootBatch, StateRootBatchHeader
from l2proof_toolkit.utils.blockchain import to_bytes32, to_hex


def make_state_roots(count: int, seed: str = "root") -> List[bytes]:
    return [keccak(text=f"{seed}-{i}") for i in range(count)]


def make_batch(
    batch_index: int = 41,
    prev_total_elements: int = 1000,
    state_roots: Optional[List[bytes]] = None,
) -> StateRootBatch:
    roots = tuple(state_roots if state_roots is not None else make_state_roots(5))
    return StateRootBatch(
        header=StateRootBatchHeader(
            batch_index=batch_index,
            batch_root=compute_merkle_root(roots) if roots else b"\x00" * 32,
            batch_size=len(roots),
            prev_total_elements=prev_total_elements,
            extra_data=b"\x00" * 64,
        ),
        state_roots=roots,
    )


def layout_record(primary_slot: bytes, value: bytes) -> Dict[bytes, bytes]:
    """Storage words of a string value written at primary_slot."""
    words = encode_storage_value(value)
    storage = {primary_slot: words[0]}
    continuation_slots = derive_continuation_slots(primary_slot, len(value))
    for slot, word in zip(continuation_slots, words[1:]):
        storage[slot.slot_key] = word
    return storage


class FakeCommitmentChain:
    """In-memory State Commitment Chain"""

    def __init__(self, batches: Optional[List[StateRootBatch]] = None):
        self.batches = batches or []
        self.requested: List[int] = []

    async def total_batches(self) -> int:
        return len(self.batches)

    async def get_batch(self, batch_index: int) -> Optional[StateRootBatch]:
        self.requested.append(batch_index)
        if 0 <= batch_index < len(self.batches):
            return self.batches[batch_index]
        return None


def _trie_node(*items: bytes) -> str:
    return to_hex(rlp.encode(list(items)))


class FakeProofNode:
    """
    In-memory L2 node answering eth_getProof.

    Unknown slots read as zero, like a real node. Slots listed in
    omit_slots are left out of responses to simulate a faulty node.
    """

    def __init__(
        self,
        storage: Optional[Dict[bytes, bytes]] = None,
        omit_slots: Sequence[bytes] = (),
    ):
        self.storage = {to_bytes32(k): to_bytes32(v) for k, v in (storage or {}).items()}
        self.omit_slots = {to_bytes32(s) for s in omit_slots}
        self.calls: List[dict] = []

    async def get_proof(self, account_address, slot_keys, block_number):
        self.calls.append(
            {
                "address": account_address,
                "slot_keys": list(slot_keys),
                "block_number": block_number,
            }
        )
        storage_proof = []
        for key in slot_keys:
            slot = to_bytes32(key)
            if slot in self.omit_slots:
                continue
            value = self.storage.get(slot, b"\x00" * 32)
            storage_proof.append(
                {
                    "key": key,
                    # Nodes return values as minimal big-endian quantities
                    "value": "0x" + (value.lstrip(b"\x00").hex() or "0"),
                    "proof": [
                        _trie_node(keccak(slot), value),
                        _trie_node(slot[:16], keccak(value)),
                    ],
                }
            )
        return {
            "address": account_address,
            "accountProof": [
                _trie_node(keccak(text="account-branch"), b"\x01"),
                _trie_node(keccak(text=account_address.lower()), b"\x02"),
            ],
            "storageProof": storage_proof,
        }


@pytest.fixture
def sample_resolver_address() -> str:
    """Sample L2 resolver address for tests."""
    return "0x5FbDB2315678afecb367f032d93F642f64180aa3"


@pytest.fixture
def sample_node() -> bytes:
    """Sample node identifier (0xabc... style 32-byte namehash)."""
    return bytes.fromhex("abc" + "0" * 61)


@pytest.fixture
def sample_record_key() -> str:
    return "network.profile"


@pytest.fixture
def batch_factory():
    """Factory for StateRootBatch fixtures."""
    return make_batch


@pytest.fixture
def chain_factory():
    """Factory for in-memory commitment chains."""
    return FakeCommitmentChain


@pytest.fixture
def proof_node_factory():
    """Factory for in-memory L2 nodes answering eth_getProof."""
    return FakeProofNode


@pytest.fixture
def record_layout():
    """Lay out a string value in storage the way Solidity does."""
    return layout_record


@pytest.fixture
def sample_batch() -> StateRootBatch:
    return make_batch()


@pytest.fixture
def commitment_chain(sample_batch) -> FakeCommitmentChain:
    """Chain with 42 batches, the latest being sample_batch."""
    older = [make_batch(batch_index=i, prev_total_elements=i * 5) for i in range(41)]
    return FakeCommitmentChain(older + [sample_batch])


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line("markers", "slow: mark test as slow-running")
