"""
Proof bundle assembly.

Runs the pipeline for one record: derive the primary slot, locate the
latest committed state root, fetch trie proofs at the pinned block and
build the batch sibling path. Every value is created per call; the
assembler holds only its collaborators.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from eth_utils import to_checksum_address

from l2proof_toolkit.proofs.generators.merkle_path import build_sibling_path
from l2proof_toolkit.proofs.generators.state_root import StateRootLocator
from l2proof_toolkit.proofs.generators.storage_slot import (
    derive_primary_physical_slot,
)
from l2proof_toolkit.proofs.generators.trie_proof import TrieProofFetcher
from l2proof_toolkit.proofs.types import (
    ProofBundle,
    RecordLocator,
    StateRootProof,
)
from l2proof_toolkit.shared.constants import ResolverConstants
from l2proof_toolkit.shared.exceptions import ProofStageTimeout
from l2proof_toolkit.shared.logging import get_logger
from l2proof_toolkit.utils.blockchain import NodeLike, to_hex, to_node_bytes

T = TypeVar("T")

_logger = get_logger(__name__)


class ProofAssembler:
    """Builds ProofBundles from a state root locator and a trie proof fetcher."""

    def __init__(
        self,
        locator: StateRootLocator,
        fetcher: TrieProofFetcher,
        stage_timeout: Optional[float] = None,
    ):
        """
        Args:
            locator: Finds the latest committed state root on L1.
            fetcher: Fetches account/storage proofs from the L2 node.
            stage_timeout: Seconds allowed for each network stage (None = no limit).
        """
        self.locator = locator
        self.fetcher = fetcher
        self.stage_timeout = stage_timeout

    async def _run_stage(self, stage: str, awaitable: Awaitable[T]) -> T:
        if self.stage_timeout is None:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=self.stage_timeout)
        except asyncio.TimeoutError as e:
            raise ProofStageTimeout(stage, self.stage_timeout) from e

    async def assemble_proof(
        self,
        contract_address: str,
        node: NodeLike,
        record_key: str,
        base_slot_index: int = ResolverConstants.TEXTS_SLOT_INDEX,
    ) -> ProofBundle:
        """
        Build the proof bundle for a record.

        Args:
            contract_address: Resolver contract on L2.
            node: 32-byte node identifier (bytes or hex string).
            record_key: Record key, e.g. "network.profile".
            base_slot_index: Declaration slot of the record mapping.

        Returns:
            ProofBundle: Evidence that the record is in a committed state root.
        """
        locator = RecordLocator(
            contract_address=to_checksum_address(contract_address),
            node=to_node_bytes(node),
            record_key=record_key,
            base_slot_index=base_slot_index,
        )
        return await self.assemble_for_locator(locator)

    async def assemble_for_locator(self, locator: RecordLocator) -> ProofBundle:
        primary_slot = derive_primary_physical_slot(locator)
        _logger.info(
            "Building proof for %s key=%r slot=%s",
            locator.contract_address,
            locator.record_key,
            primary_slot.hex_key,
        )

        state_root = await self._run_stage(
            "state_root_lookup", self.locator.locate_latest_state_root()
        )
        _logger.info(
            "Using state root %s (batch %d) at L2 block %d",
            to_hex(state_root.value),
            state_root.batch_index,
            state_root.producing_block_number,
        )

        account_proof, storage_proofs = await self._run_stage(
            "trie_proof_fetch",
            self.fetcher.fetch_proofs(
                locator.contract_address,
                primary_slot,
                state_root.producing_block_number,
            ),
        )

        siblings = build_sibling_path(
            state_root.batch.state_roots, state_root.index_within_batch
        )

        return ProofBundle(
            target=locator.contract_address,
            state_root=state_root.value,
            state_root_batch_header=state_root.batch_header,
            state_root_proof=StateRootProof(
                index=state_root.index_within_batch,
                siblings=tuple(siblings),
            ),
            state_trie_witness=account_proof.witness,
            storage_proofs=tuple(storage_proofs),
        )
