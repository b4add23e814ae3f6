from l2proof_toolkit.proofs.assembler import ProofAssembler
from l2proof_toolkit.proofs.manager import L2RecordProofs
from l2proof_toolkit.proofs.types import (
    AccountProof,
    PhysicalSlot,
    ProofBundle,
    RecordLocator,
    RollupStateRoot,
    SlotClassification,
    SlotKind,
    StateRootBatch,
    StateRootBatchHeader,
    StorageProof,
    ValueEncoding,
)

__all__ = [
    "L2RecordProofs",
    "ProofAssembler",
    "AccountProof",
    "PhysicalSlot",
    "ProofBundle",
    "RecordLocator",
    "RollupStateRoot",
    "SlotClassification",
    "SlotKind",
    "StateRootBatch",
    "StateRootBatchHeader",
    "StorageProof",
    "ValueEncoding",
]
