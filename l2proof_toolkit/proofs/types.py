"""
Type definitions for cross-layer record proofs.

All value objects are frozen and built fresh for each proof request.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple, TypedDict

from eth_abi import encode
from eth_utils import to_checksum_address

from l2proof_toolkit.shared.constants import ResolverConstants
from l2proof_toolkit.utils.blockchain import encode_rlp_witness, to_hex

# =============================================================================
# ENUMS
# =============================================================================


class SlotKind(Enum):
    """Role of a physical storage slot within a record."""

    PRIMARY = "primary"  # Slot computed from the mapping keys
    CONTINUATION = "continuation"  # Data slot of a long value


class ValueEncoding(Enum):
    """Solidity string/bytes storage encoding."""

    SHORT = "short"  # Data and length*2 packed in the primary slot
    LONG = "long"  # length*2+1 in primary, data at keccak(primary) + i


# =============================================================================
# RECORD / SLOT TYPES
# =============================================================================


@dataclass(frozen=True)
class RecordLocator:
    """Logical address of a record in the resolver's storage."""

    contract_address: str
    node: bytes
    record_key: str
    base_slot_index: int = ResolverConstants.TEXTS_SLOT_INDEX

    @classmethod
    def text(
        cls, contract_address: str, node: bytes, record_key: str
    ) -> "RecordLocator":
        return cls(
            contract_address=to_checksum_address(contract_address),
            node=node,
            record_key=record_key,
            base_slot_index=ResolverConstants.TEXTS_SLOT_INDEX,
        )


@dataclass(frozen=True)
class PhysicalSlot:
    """A concrete 32-byte storage key belonging to a record."""

    slot_key: bytes
    kind: SlotKind
    sequence: int = 0

    @property
    def hex_key(self) -> str:
        return to_hex(self.slot_key)


@dataclass(frozen=True)
class SlotClassification:
    encoding: ValueEncoding
    length: int

    @property
    def continuation_count(self) -> int:
        """Number of data slots a long value occupies"""
        if self.encoding is ValueEncoding.SHORT:
            return 0
        return -(-self.length // ResolverConstants.WORD_SIZE)


# =============================================================================
# STATE ROOT TYPES
# =============================================================================


@dataclass(frozen=True)
class StateRootBatchHeader:
    """Header of a batch appended to the State Commitment Chain."""

    batch_index: int
    batch_root: bytes
    batch_size: int
    prev_total_elements: int
    extra_data: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batchIndex": self.batch_index,
            "batchRoot": to_hex(self.batch_root),
            "batchSize": self.batch_size,
            "prevTotalElements": self.prev_total_elements,
            "extraData": to_hex(self.extra_data),
        }

    def as_abi_tuple(self) -> Tuple[int, bytes, int, int, bytes]:
        return (
            self.batch_index,
            self.batch_root,
            self.batch_size,
            self.prev_total_elements,
            self.extra_data,
        )


@dataclass(frozen=True)
class StateRootBatch:
    header: StateRootBatchHeader
    state_roots: Tuple[bytes, ...]


@dataclass(frozen=True)
class RollupStateRoot:
    """An L2 state root committed on L1, with its position and block."""

    value: bytes
    batch_index: int
    index_within_batch: int
    batch: StateRootBatch
    producing_block_number: int

    @property
    def batch_header(self) -> StateRootBatchHeader:
        return self.batch.header


# =============================================================================
# TRIE PROOF TYPES
# =============================================================================


class RawStorageProof(TypedDict):
    """One storageProof entry of an eth_getProof response."""

    key: Any
    value: Any
    proof: List[Any]


class RawProofResponse(TypedDict, total=False):
    """The eth_getProof response fields used by the fetcher."""

    address: str
    accountProof: List[Any]
    storageProof: List[RawStorageProof]


@dataclass(frozen=True)
class AccountProof:
    """Account trie nodes proving the resolver's account."""

    nodes: Tuple[bytes, ...]

    @property
    def witness(self) -> bytes:
        return encode_rlp_witness(self.nodes)


@dataclass(frozen=True)
class StorageProof:
    """Storage trie proof for one physical slot."""

    slot_key: bytes
    raw_value: bytes
    trie_witness: Tuple[bytes, ...]
    kind: SlotKind = SlotKind.PRIMARY
    sequence: int = 0

    @property
    def storage_trie_witness(self) -> bytes:
        return encode_rlp_witness(self.trie_witness)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": to_hex(self.slot_key),
            "value": to_hex(self.raw_value),
            "proof": [to_hex(node) for node in self.trie_witness],
            "storageTrieWitness": to_hex(self.storage_trie_witness),
        }

    def as_abi_tuple(self) -> Tuple[bytes, bytes, List[bytes], bytes]:
        return (
            self.slot_key,
            self.raw_value,
            list(self.trie_witness),
            self.storage_trie_witness,
        )


# =============================================================================
# BUNDLE
# =============================================================================


@dataclass(frozen=True)
class StateRootProof:
    index: int
    siblings: Tuple[bytes, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "siblings": [to_hex(sibling) for sibling in self.siblings],
        }


PROOF_BUNDLE_ABI_TYPE = (
    "(address,bytes32,(uint256,bytes32,uint256,uint256,bytes),"
    "(uint256,bytes32[]),bytes,(bytes32,bytes32,bytes[],bytes)[])"
)


@dataclass(frozen=True)
class ProofBundle:
    """
    Self-contained evidence for one record, consumed by the L1 verifier.

    storage_proofs is ordered primary first, then continuation slots in
    ascending sequence; the verifier reassembles long values in this order.
    """

    target: str
    state_root: bytes
    state_root_batch_header: StateRootBatchHeader
    state_root_proof: StateRootProof
    state_trie_witness: bytes
    storage_proofs: Tuple[StorageProof, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """JSON form, keys in the verifier's field order"""
        return {
            "target": self.target,
            "stateRoot": to_hex(self.state_root),
            "stateRootBatchHeader": self.state_root_batch_header.to_dict(),
            "stateRootProof": self.state_root_proof.to_dict(),
            "stateTrieWitness": to_hex(self.state_trie_witness),
            "storageProofs": [proof.to_dict() for proof in self.storage_proofs],
        }

    def encode(self) -> bytes:
        """ABI encode the bundle as a single tuple for the verifier"""
        return encode(
            [PROOF_BUNDLE_ABI_TYPE],
            [
                (
                    self.target,
                    self.state_root,
                    self.state_root_batch_header.as_abi_tuple(),
                    (
                        self.state_root_proof.index,
                        list(self.state_root_proof.siblings),
                    ),
                    self.state_trie_witness,
                    [proof.as_abi_tuple() for proof in self.storage_proofs],
                )
            ],
        )

    def reassemble_value(self) -> bytes:
        """Rebuild the record bytes from the ordered storage proofs."""
        # storage_slot imports this module
        from l2proof_toolkit.proofs.generators.storage_slot import (
            decode_storage_value,
        )

        if not self.storage_proofs:
            raise ValueError("Bundle has no storage proofs")
        primary, *continuations = self.storage_proofs
        return decode_storage_value(
            primary.raw_value, [proof.raw_value for proof in continuations]
        )
