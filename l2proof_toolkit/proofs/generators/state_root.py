"""Latest committed L2 state root lookup"""

from l2proof_toolkit.proofs.interfaces import CommitmentChainReader
from l2proof_toolkit.proofs.types import RollupStateRoot
from l2proof_toolkit.shared.exceptions import StateRootNotFound
from l2proof_toolkit.shared.logging import get_logger

_logger = get_logger(__name__)


def compute_producing_block_number(
    prev_total_elements: int, index_within_batch: int
) -> int:
    """
    L2 block that produced a committed state root.

    Elements are numbered across all batches from zero while L2 blocks
    start at one, hence the trailing +1.
    """
    return prev_total_elements + index_within_batch + 1


class StateRootLocator:
    """Finds the most recent state root committed to L1."""

    def __init__(self, reader: CommitmentChainReader):
        self.reader = reader

    async def locate_latest_state_root(self) -> RollupStateRoot:
        """
        Locate the first state root of the latest committed batch.

        Returns:
            RollupStateRoot: The state root, its batch and the L2 block
            number that produced it.

        Raises:
            StateRootNotFound: No batch committed yet, or the latest batch
            is missing or empty.
        """
        total_batches = await self.reader.total_batches()
        if total_batches <= 0:
            raise StateRootNotFound(
                "No state batches committed to the State Commitment Chain"
            )

        batch_index = total_batches - 1
        batch = await self.reader.get_batch(batch_index)
        if batch is None or not batch.state_roots:
            raise StateRootNotFound(
                f"State batch {batch_index} not found or empty"
            )

        index_within_batch = 0
        block_number = compute_producing_block_number(
            batch.header.prev_total_elements, index_within_batch
        )
        _logger.debug(
            "Latest batch %d (prevTotalElements=%d) -> L2 block %d",
            batch_index,
            batch.header.prev_total_elements,
            block_number,
        )

        return RollupStateRoot(
            value=batch.state_roots[index_within_batch],
            batch_index=batch_index,
            index_within_batch=index_within_batch,
            batch=batch,
            producing_block_number=block_number,
        )
