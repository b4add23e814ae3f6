"""Account and storage trie proofs from the L2 node"""

from typing import Dict, List, Sequence, Tuple

from l2proof_toolkit.proofs.generators.storage_slot import (
    classify_slot_value,
    derive_continuation_slots,
)
from l2proof_toolkit.proofs.interfaces import ProofQueryClient
from l2proof_toolkit.proofs.types import (
    AccountProof,
    PhysicalSlot,
    RawProofResponse,
    RawStorageProof,
    SlotClassification,
    StorageProof,
    ValueEncoding,
)
from l2proof_toolkit.shared.constants import ResolverConstants
from l2proof_toolkit.shared.exceptions import (
    EmptySlotUnsupported,
    IncompleteLongValueProof,
    NonRetryableException,
    RetryableException,
    TrieProofQueryFailed,
)
from l2proof_toolkit.shared.logging import get_logger
from l2proof_toolkit.utils.blockchain import normalize_nodes, to_bytes32

_logger = get_logger(__name__)


class TrieProofFetcher:
    """Fetches eth_getProof witnesses for a record's physical slots."""

    def __init__(self, client: ProofQueryClient):
        self.client = client

    async def _query(
        self,
        contract_address: str,
        slots: Sequence[PhysicalSlot],
        block_number: int,
    ) -> Tuple[AccountProof, Dict[bytes, RawStorageProof]]:
        if isinstance(block_number, bool) or not isinstance(block_number, int):
            raise ValueError(
                f"Proofs must be pinned to a block number, got {block_number!r}"
            )

        _logger.debug(
            "eth_getProof %s slots=%d block=%d",
            contract_address,
            len(slots),
            block_number,
        )
        try:
            response: RawProofResponse = await self.client.get_proof(
                contract_address, [slot.hex_key for slot in slots], block_number
            )
        except (RetryableException, NonRetryableException):
            raise
        except Exception as e:
            raise TrieProofQueryFailed(
                f"eth_getProof failed for {contract_address} at block "
                f"{block_number}: {e}",
                block_number=block_number,
            ) from e

        try:
            account_proof = AccountProof(
                nodes=tuple(normalize_nodes(response["accountProof"]))
            )
            entries = {
                to_bytes32(entry["key"]): entry
                for entry in response["storageProof"]
            }
        except (KeyError, TypeError, ValueError) as e:
            raise TrieProofQueryFailed(
                f"Malformed eth_getProof response at block {block_number}: {e}",
                block_number=block_number,
            ) from e

        return account_proof, entries

    @staticmethod
    def _to_storage_proof(
        entry: RawStorageProof, slot: PhysicalSlot, block_number: int
    ) -> StorageProof:
        try:
            return StorageProof(
                slot_key=slot.slot_key,
                raw_value=to_bytes32(entry["value"]),
                trie_witness=tuple(normalize_nodes(entry["proof"])),
                kind=slot.kind,
                sequence=slot.sequence,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TrieProofQueryFailed(
                f"Malformed storage proof for slot {slot.hex_key}: {e}",
                block_number=block_number,
            ) from e

    async def fetch_slot_proofs(
        self,
        contract_address: str,
        slots: Sequence[PhysicalSlot],
        block_number: int,
    ) -> Tuple[AccountProof, List[StorageProof]]:
        """
        Fetch proofs for an explicit slot list, in the order given.

        Raises:
            TrieProofQueryFailed: On query errors, malformed responses or
                when the response lacks a requested slot.
        """
        account_proof, entries = await self._query(
            contract_address, slots, block_number
        )
        missing = [slot.hex_key for slot in slots if slot.slot_key not in entries]
        if missing:
            raise TrieProofQueryFailed(
                f"eth_getProof response is missing slots {missing}",
                block_number=block_number,
            )
        return account_proof, [
            self._to_storage_proof(entries[slot.slot_key], slot, block_number)
            for slot in slots
        ]

    async def _fetch_continuations(
        self,
        contract_address: str,
        slots: List[PhysicalSlot],
        block_number: int,
    ) -> List[StorageProof]:
        _, entries = await self._query(contract_address, slots, block_number)

        proofs = [
            self._to_storage_proof(entries[slot.slot_key], slot, block_number)
            for slot in slots
            if slot.slot_key in entries
        ]
        if len(proofs) != len(slots):
            raise IncompleteLongValueProof(
                f"Long value needs {len(slots)} continuation proofs, node "
                f"returned {len(proofs)}",
                expected=len(slots),
                received=len(proofs),
            )
        return proofs

    @staticmethod
    def _check_encoding(
        slot: PhysicalSlot,
        classification: SlotClassification,
        block_number: int,
    ) -> None:
        length = classification.length
        if classification.encoding is ValueEncoding.SHORT:
            valid = length < ResolverConstants.WORD_SIZE
        else:
            valid = (
                ResolverConstants.WORD_SIZE
                <= length
                <= ResolverConstants.MAX_VALUE_LENGTH
            )
        if not valid:
            raise TrieProofQueryFailed(
                f"Slot {slot.hex_key} holds an invalid "
                f"{classification.encoding.value} encoding of length {length}",
                block_number=block_number,
            )

    async def fetch_proofs(
        self,
        contract_address: str,
        primary_slot: PhysicalSlot,
        block_number: int,
    ) -> Tuple[AccountProof, List[StorageProof]]:
        """
        Fetch the account proof and every storage proof of a record.

        Args:
            contract_address: The resolver contract on L2.
            primary_slot: The record's primary slot.
            block_number: Pinned L2 block of the committed state root.

        Returns:
            Tuple[AccountProof, List[StorageProof]]: The account proof and the
            storage proofs, primary first then continuation slots ascending.

        Raises:
            EmptySlotUnsupported: The primary slot holds the zero word.
            IncompleteLongValueProof: A continuation slot proof is missing.
            TrieProofQueryFailed: Query error, malformed response or a primary
                word whose length does not fit its encoding.
        """
        account_proof, (primary_proof,) = await self.fetch_slot_proofs(
            contract_address, [primary_slot], block_number
        )
        if primary_proof.raw_value == ResolverConstants.ZERO_WORD:
            raise EmptySlotUnsupported(primary_slot.hex_key)

        classification = classify_slot_value(primary_proof.raw_value)
        self._check_encoding(primary_slot, classification, block_number)
        if classification.encoding is ValueEncoding.SHORT:
            _logger.info(
                "Slot %s holds a short value (%d bytes)",
                primary_slot.hex_key,
                classification.length,
            )
            return account_proof, [primary_proof]

        continuation_slots = derive_continuation_slots(
            primary_slot.slot_key, classification.length
        )
        _logger.info(
            "Slot %s holds a long value (%d bytes) over %d slots",
            primary_slot.hex_key,
            classification.length,
            len(continuation_slots),
        )
        continuation_proofs = await self._fetch_continuations(
            contract_address, continuation_slots, block_number
        )
        return account_proof, [primary_proof, *continuation_proofs]
