"""L2 Proof Toolkit - cross-layer proofs for records stored on an L2 resolver."""

__version__ = "0.1.0"

from .proofs import L2RecordProofs, ProofAssembler, ProofBundle, RecordLocator

__all__ = ["L2RecordProofs", "ProofAssembler", "ProofBundle", "RecordLocator"]
