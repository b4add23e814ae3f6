"""
Unit tests for the L2RecordProofs facade.
"""

from unittest.mock import AsyncMock, patch

import pytest

from l2proof_toolkit.proofs.assembler import ProofAssembler
from l2proof_toolkit.proofs.generators.state_root import StateRootLocator
from l2proof_toolkit.proofs.generators.storage_slot import derive_primary_slot
from l2proof_toolkit.proofs.generators.trie_proof import TrieProofFetcher
from l2proof_toolkit.proofs.manager import L2RecordProofs
from l2proof_toolkit.proofs.types import RecordLocator
from l2proof_toolkit.shared.constants import GlobalConstants
from l2proof_toolkit.shared.exceptions import (
    ConfigurationException,
    EmptySlotUnsupported,
    StateRootNotFound,
    TrieProofQueryFailed,
)
from l2proof_toolkit.shared.results import ErrorSeverity
from l2proof_toolkit.shared.services.commitment_chain_service import (
    CommitmentChainService,
)


@pytest.fixture
def proofs_factory(commitment_chain, proof_node_factory, record_layout, sample_node):
    def _build(value=None, chain=None):
        storage = {}
        if value is not None:
            primary = derive_primary_slot(9, sample_node, "network.profile")
            storage = record_layout(primary, value)
        node = proof_node_factory(storage)
        assembler = ProofAssembler(
            StateRootLocator(chain or commitment_chain), TrieProofFetcher(node)
        )
        return L2RecordProofs(assembler=assembler), node

    return _build


@pytest.fixture
def no_sleep():
    with patch("asyncio.sleep", AsyncMock()) as sleep:
        yield sleep


class TestConstruction:
    def test_missing_l1_rpc(self):
        with patch.object(GlobalConstants, "L1_RPC_URL", None), patch.object(
            GlobalConstants, "L2_RPC_URL", "http://l2.example"
        ):
            with pytest.raises(ConfigurationException, match="L1 RPC"):
                L2RecordProofs()

    def test_missing_l2_rpc(self):
        with patch.object(GlobalConstants, "L2_RPC_URL", None):
            with pytest.raises(ConfigurationException, match="L2 RPC"):
                L2RecordProofs(l1_rpc_url="http://l1.example")

    def test_wires_services(self):
        proofs = L2RecordProofs(
            l1_rpc_url="http://l1.example",
            l2_rpc_url="http://l2.example",
            state_commitment_chain="0x0000000000000000000000000000000000000001",
            scc_from_block=123,
            stage_timeout=5.0,
        )

        chain = proofs.commitment_chain
        assert isinstance(chain, CommitmentChainService)
        assert chain.address == "0x0000000000000000000000000000000000000001"
        assert chain.from_block == 123
        assert chain.web3_service is proofs.l1_service
        assert proofs.assembler.fetcher.client is proofs.l2_service
        assert proofs.assembler.stage_timeout == 5.0


class TestTextProof:
    @pytest.mark.asyncio
    async def test_success(self, proofs_factory, sample_resolver_address):
        proofs, _ = proofs_factory(b"test")

        result = await proofs.get_text_proof(
            sample_resolver_address, "0x" + "abc" + "0" * 61, "network.profile"
        )

        assert result.success
        bundle = result.unwrap()
        assert bundle.target == sample_resolver_address
        assert bundle.reassemble_value() == b"test"

    @pytest.mark.asyncio
    async def test_bad_node(self, proofs_factory, sample_resolver_address):
        proofs, node = proofs_factory(b"test")

        result = await proofs.get_text_proof(
            sample_resolver_address, "0x" + "ab" * 33, "network.profile"
        )

        assert not result.success
        assert result.errors[0].source == "text_proof"
        assert node.calls == []

    @pytest.mark.asyncio
    async def test_empty_record_is_critical(
        self, proofs_factory, sample_resolver_address, sample_node, no_sleep
    ):
        proofs, node = proofs_factory(None)

        result = await proofs.get_record_proof(
            RecordLocator.text(sample_resolver_address, sample_node, "missing")
        )

        assert not result.success
        error = result.errors[0]
        assert error.severity is ErrorSeverity.CRITICAL
        assert isinstance(error.exception, EmptySlotUnsupported)
        assert error.context["key"] == "missing"
        assert len(node.calls) == 1
        no_sleep.assert_not_awaited()


class TestRetries:
    @pytest.mark.asyncio
    async def test_transient_failure_retried(
        self, proofs_factory, sample_resolver_address, sample_node, no_sleep
    ):
        proofs, node = proofs_factory(b"hello")
        real_get_proof = node.get_proof
        node.get_proof = AsyncMock(side_effect=_fail_once(real_get_proof))

        result = await proofs.get_record_proof(
            RecordLocator.text(sample_resolver_address, sample_node, "network.profile"),
            max_retries=3,
        )

        assert result.success
        assert result.unwrap().reassemble_value() == b"hello"
        assert node.get_proof.await_count == 2
        no_sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_retries_exhausted(
        self, proofs_factory, sample_resolver_address, sample_node, no_sleep
    ):
        proofs, node = proofs_factory(b"hello")
        node.get_proof = AsyncMock(side_effect=ConnectionError("refused"))

        result = await proofs.get_record_proof(
            RecordLocator.text(sample_resolver_address, sample_node, "network.profile"),
            max_retries=2,
        )

        assert not result.success
        assert result.errors[0].severity is ErrorSeverity.ERROR
        assert isinstance(result.errors[0].exception, TrieProofQueryFailed)
        assert node.get_proof.await_count == 2


class TestLatestStateRoot:
    @pytest.mark.asyncio
    async def test_success(self, proofs_factory, sample_batch):
        proofs, _ = proofs_factory()

        result = await proofs.get_latest_state_root()

        state_root = result.unwrap()
        assert state_root.batch_header == sample_batch.header
        assert state_root.producing_block_number == 1001

    @pytest.mark.asyncio
    async def test_empty_chain(self, proofs_factory, chain_factory, no_sleep):
        proofs, _ = proofs_factory(chain=chain_factory([]))

        result = await proofs.get_latest_state_root()

        assert not result.success
        assert isinstance(result.errors[0].exception, StateRootNotFound)
        no_sleep.assert_not_awaited()


def _fail_once(real):
    calls = {"count": 0}

    async def _side_effect(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise TrieProofQueryFailed("node lagging")
        return await real(*args, **kwargs)

    return _side_effect
