"""
Reader for the L1 State Commitment Chain.

Batch headers come from StateBatchAppended logs and the state roots of a
batch from the appendStateBatch calldata of the transaction that emitted it.
"""

from typing import Optional, Tuple

from eth_abi import decode
from eth_utils import keccak
from hexbytes import HexBytes

from l2proof_toolkit.proofs.types import StateRootBatch, StateRootBatchHeader
from l2proof_toolkit.shared.constants import CommitmentChainConstants
from l2proof_toolkit.shared.exceptions import (
    CommitmentQueryFailed,
    NonRetryableException,
    RetryableException,
    StateRootNotFound,
)
from l2proof_toolkit.shared.logging import get_logger
from l2proof_toolkit.shared.services.web3_service import Web3Service
from l2proof_toolkit.utils.blockchain import to_hex

_logger = get_logger(__name__)

STATE_BATCH_APPENDED_TOPIC = to_hex(
    keccak(text=CommitmentChainConstants.STATE_BATCH_APPENDED_SIGNATURE)
)
APPEND_STATE_BATCH_SELECTOR = keccak(
    text=CommitmentChainConstants.APPEND_STATE_BATCH_SIGNATURE
)[:4]


def decode_batch_appended_data(
    batch_index: int, data: bytes
) -> StateRootBatchHeader:
    """Decode the non-indexed fields of a StateBatchAppended log"""
    batch_root, batch_size, prev_total_elements, extra_data = decode(
        ["bytes32", "uint256", "uint256", "bytes"], bytes(HexBytes(data))
    )
    return StateRootBatchHeader(
        batch_index=batch_index,
        batch_root=batch_root,
        batch_size=batch_size,
        prev_total_elements=prev_total_elements,
        extra_data=extra_data,
    )


def decode_append_state_batch_input(tx_input: bytes) -> Tuple[bytes, ...]:
    """Extract the state roots from appendStateBatch calldata"""
    data = bytes(HexBytes(tx_input))
    if data[:4] != APPEND_STATE_BATCH_SELECTOR:
        raise StateRootNotFound(
            f"Transaction input is not appendStateBatch (selector {to_hex(data[:4])})"
        )
    state_roots, _ = decode(["bytes32[]", "uint256"], data[4:])
    return tuple(state_roots)


class CommitmentChainService:
    """Web3 implementation of the commitment chain reader."""

    ABI_NAME = "state_commitment_chain"

    def __init__(
        self,
        web3_service: Web3Service,
        address: str = CommitmentChainConstants.DEFAULT_ADDRESS,
        from_block: int = 0,
    ):
        self.web3_service = web3_service
        self.address = address
        self.from_block = from_block

    async def total_batches(self) -> int:
        contract = self.web3_service.get_contract(self.address, self.ABI_NAME)
        try:
            return await contract.functions.getTotalBatches().call()
        except Exception as e:
            raise CommitmentQueryFailed(
                f"getTotalBatches() failed on {self.address}: {e}"
            ) from e

    async def get_batch(self, batch_index: int) -> Optional[StateRootBatch]:
        """
        Read the header and state roots of a batch.

        Returns:
            Optional[StateRootBatch]: None when no StateBatchAppended log
            exists for the batch index.
        """
        try:
            return await self._read_batch(batch_index)
        except (RetryableException, NonRetryableException):
            raise
        except Exception as e:
            raise CommitmentQueryFailed(
                f"Reading state batch {batch_index} failed: {e}"
            ) from e

    async def _read_batch(self, batch_index: int) -> Optional[StateRootBatch]:
        w3 = self.web3_service.w3
        logs = await w3.eth.get_logs(
            {
                "address": self.web3_service.get_contract(
                    self.address, self.ABI_NAME
                ).address,
                "fromBlock": self.from_block,
                "toBlock": "latest",
                "topics": [
                    STATE_BATCH_APPENDED_TOPIC,
                    to_hex(batch_index.to_bytes(32, "big")),
                ],
            }
        )
        if not logs:
            _logger.warning("No StateBatchAppended log for batch %d", batch_index)
            return None

        log = logs[-1]
        header = decode_batch_appended_data(batch_index, log["data"])
        tx = await w3.eth.get_transaction(log["transactionHash"])
        state_roots = decode_append_state_batch_input(tx["input"])

        if header.batch_size != len(state_roots):
            raise StateRootNotFound(
                f"Batch {batch_index} header declares {header.batch_size} "
                f"elements but calldata holds {len(state_roots)}"
            )
        return StateRootBatch(header=header, state_roots=state_roots)
