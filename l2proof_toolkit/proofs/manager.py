from typing import Any, Dict, Optional

from eth_utils import to_checksum_address

from l2proof_toolkit.proofs.assembler import ProofAssembler
from l2proof_toolkit.proofs.generators.state_root import StateRootLocator
from l2proof_toolkit.proofs.generators.trie_proof import TrieProofFetcher
from l2proof_toolkit.proofs.types import (
    ProofBundle,
    RecordLocator,
    RollupStateRoot,
)
from l2proof_toolkit.shared.constants import GlobalConstants
from l2proof_toolkit.shared.exceptions import ConfigurationException
from l2proof_toolkit.shared.logging import get_logger
from l2proof_toolkit.shared.results import ProcessingError, Result
from l2proof_toolkit.shared.retry import retry_async_operation
from l2proof_toolkit.shared.services.commitment_chain_service import (
    CommitmentChainService,
)
from l2proof_toolkit.shared.services.web3_service import Web3Service
from l2proof_toolkit.utils.blockchain import NodeLike, to_hex, to_node_bytes

_logger = get_logger(__name__)


class L2RecordProofs:
    """Entry point for generating proofs of L2 resolver records"""

    def __init__(
        self,
        l1_rpc_url: Optional[str] = None,
        l2_rpc_url: Optional[str] = None,
        state_commitment_chain: Optional[str] = None,
        scc_from_block: Optional[int] = None,
        stage_timeout: Optional[float] = None,
        assembler: Optional[ProofAssembler] = None,
    ):
        """
        Wire the web3-backed pipeline from configuration.

        Explicit arguments override the environment (see GlobalConstants).
        Passing an assembler skips building network services entirely.
        """
        if assembler is not None:
            self.assembler = assembler
            return

        l1_rpc_url = l1_rpc_url or GlobalConstants.get_rpc_url("l1")
        l2_rpc_url = l2_rpc_url or GlobalConstants.get_rpc_url("l2")
        if not l1_rpc_url:
            raise ConfigurationException(
                "L1 RPC URL is not set (L1_RPC_URL environment variable)"
            )
        if not l2_rpc_url:
            raise ConfigurationException(
                "L2 RPC URL is not set (L2_RPC_URL environment variable)"
            )

        self.l1_service = Web3Service(l1_rpc_url)
        self.l2_service = Web3Service(l2_rpc_url)
        self.commitment_chain = CommitmentChainService(
            self.l1_service,
            address=state_commitment_chain
            or GlobalConstants.STATE_COMMITMENT_CHAIN,
            from_block=(
                scc_from_block
                if scc_from_block is not None
                else GlobalConstants.SCC_FROM_BLOCK
            ),
        )
        self.assembler = ProofAssembler(
            StateRootLocator(self.commitment_chain),
            TrieProofFetcher(self.l2_service),
            stage_timeout=(
                stage_timeout
                if stage_timeout is not None
                else GlobalConstants.STAGE_TIMEOUT
            ),
        )

    async def get_record_proof(
        self, locator: RecordLocator, max_retries: int = 3
    ) -> Result[ProofBundle]:
        """
        Generate the proof bundle for a record.

        Args:
            locator: The record's resolver, node, key and base slot
            max_retries: Attempts for transient (retryable) failures

        Returns:
            Result[ProofBundle]: Success with the bundle, or failure carrying
            the typed exception (StateRootNotFound, EmptySlotUnsupported, ...)
        """
        context: Dict[str, Any] = {
            "resolver": locator.contract_address,
            "node": to_hex(locator.node),
            "key": locator.record_key,
            "base_slot": locator.base_slot_index,
        }

        try:
            bundle = await retry_async_operation(
                self.assembler.assemble_for_locator,
                locator,
                max_attempts=max_retries,
                base_delay=1.0,
                operation_name=f"record_proof_{locator.record_key}",
            )
            return Result.ok(bundle)
        except Exception as e:
            _logger.error("Record proof failed for %s: %s", context, e)
            return Result.fail(
                ProcessingError.from_exception("record_proof", e, context)
            )

    async def get_text_proof(
        self,
        resolver: str,
        node: NodeLike,
        record_key: str,
        max_retries: int = 3,
    ) -> Result[ProofBundle]:
        """Generate the proof bundle for a text record"""
        try:
            locator = RecordLocator.text(
                to_checksum_address(resolver), to_node_bytes(node), record_key
            )
        except ValueError as e:
            return Result.fail(
                ProcessingError.from_exception(
                    "text_proof",
                    e,
                    {"resolver": resolver, "key": record_key},
                )
            )
        return await self.get_record_proof(locator, max_retries=max_retries)

    async def get_latest_state_root(
        self, max_retries: int = 3
    ) -> Result[RollupStateRoot]:
        """Locate the latest committed state root and its L2 block"""
        try:
            state_root = await retry_async_operation(
                self.assembler.locator.locate_latest_state_root,
                max_attempts=max_retries,
                base_delay=1.0,
                operation_name="latest_state_root",
            )
            return Result.ok(state_root)
        except Exception as e:
            return Result.fail(ProcessingError.from_exception("state_root", e))
