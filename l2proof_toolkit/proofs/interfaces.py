"""
Network capabilities used by the proof pipeline.

The web3-backed implementations live in shared.services; tests substitute
in-memory doubles returning canned trie fixtures.
"""

from typing import Optional, Protocol, Sequence

from l2proof_toolkit.proofs.types import RawProofResponse, StateRootBatch


class CommitmentChainReader(Protocol):
    """Read-only view of the L1 State Commitment Chain."""

    async def total_batches(self) -> int:
        ...

    async def get_batch(self, batch_index: int) -> Optional[StateRootBatch]:
        """Return the batch header and its state roots, or None if unknown."""
        ...


class ProofQueryClient(Protocol):
    """An L2 node answering eth_getProof."""

    async def get_proof(
        self,
        account_address: str,
        slot_keys: Sequence[str],
        block_number: int,
    ) -> RawProofResponse:
        ...
