"""
Unit tests for the latest state root lookup.
"""

import pytest

from l2proof_toolkit.proofs.generators.state_root import (
    StateRootLocator,
    compute_producing_block_number,
)
from l2proof_toolkit.shared.exceptions import (
    NonRetryableException,
    StateRootNotFound,
)


class TestProducingBlockNumber:
    def test_offset_arithmetic(self):
        assert compute_producing_block_number(1000, 5) == 1006

    def test_first_element_of_first_batch(self):
        assert compute_producing_block_number(0, 0) == 1


class TestStateRootLocator:
    @pytest.mark.asyncio
    async def test_uses_latest_batch(self, commitment_chain, sample_batch):
        state_root = await StateRootLocator(
            commitment_chain
        ).locate_latest_state_root()

        assert commitment_chain.requested == [41]
        assert state_root.batch_index == 41
        assert state_root.index_within_batch == 0
        assert state_root.value == sample_batch.state_roots[0]
        assert state_root.batch_header == sample_batch.header
        assert state_root.producing_block_number == 1001

    @pytest.mark.asyncio
    async def test_no_batches(self, chain_factory):
        with pytest.raises(StateRootNotFound, match="No state batches"):
            await StateRootLocator(chain_factory([])).locate_latest_state_root()

    @pytest.mark.asyncio
    async def test_empty_batch(self, chain_factory, batch_factory):
        chain = chain_factory([batch_factory(batch_index=0, state_roots=[])])

        with pytest.raises(StateRootNotFound, match="not found or empty"):
            await StateRootLocator(chain).locate_latest_state_root()

    @pytest.mark.asyncio
    async def test_batch_missing(self):
        class Reader:
            async def total_batches(self):
                return 3

            async def get_batch(self, batch_index):
                return None

        with pytest.raises(StateRootNotFound) as exc_info:
            await StateRootLocator(Reader()).locate_latest_state_root()

        assert isinstance(exc_info.value, NonRetryableException)
