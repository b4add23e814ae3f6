"""Storage slot derivation for resolver records"""

from typing import List, Sequence

from eth_abi import encode
from eth_utils import keccak

from l2proof_toolkit.proofs.types import (
    PhysicalSlot,
    RecordLocator,
    SlotClassification,
    SlotKind,
    ValueEncoding,
)
from l2proof_toolkit.shared.constants import ResolverConstants
from l2proof_toolkit.utils.blockchain import (
    UINT256_MOD,
    HexLike,
    to_bytes32,
    word_to_int,
)

WORD_SIZE = ResolverConstants.WORD_SIZE


def _node_mapping_slot(base_slot_index: int, node: bytes) -> bytes:
    """
    Slot of the inner mapping for a node: keccak(node . base_slot).

    Args:
        base_slot_index (int): Declaration slot of the outer mapping.
        node (bytes): 32-byte node identifier (namehash).

    Returns:
        bytes: The 32-byte slot of mapping(string => string) for the node.
    """
    return keccak(encode(["bytes32", "uint256"], [node, base_slot_index]))


def derive_primary_slot(
    base_slot_index: int, node: bytes, record_key: str
) -> bytes:
    """
    Calculate the primary storage slot of a record.

    Reproduces the Solidity layout of
    mapping(bytes32 => mapping(string => string)) declared at base_slot_index:
    string keys are hashed unpadded, followed by the inner mapping slot.

    Args:
        base_slot_index (int): Declaration slot of the outer mapping.
        node (bytes): 32-byte node identifier.
        record_key (str): Record key, e.g. "network.profile".

    Returns:
        bytes: The 32-byte primary slot key.
    """
    if base_slot_index < 0:
        raise ValueError(f"Invalid base slot index: {base_slot_index}")
    node = bytes(node)
    if len(node) != 32:
        raise ValueError(f"Node must be 32 bytes, got {len(node)}")

    inner_slot = _node_mapping_slot(base_slot_index, node)
    return keccak(record_key.encode("utf-8") + inner_slot)


def derive_primary_physical_slot(locator: RecordLocator) -> PhysicalSlot:
    return PhysicalSlot(
        slot_key=derive_primary_slot(
            locator.base_slot_index, locator.node, locator.record_key
        ),
        kind=SlotKind.PRIMARY,
        sequence=0,
    )


def classify_slot_value(raw_value: HexLike) -> SlotClassification:
    """
    Classify the word stored in a primary slot.

    The lowest bit of the last byte selects the encoding: 0 is short form
    (length = last byte / 2), 1 is long form (length = (word - 1) / 2).
    The all-zero word classifies as a short value of length 0.
    """
    word = to_bytes32(raw_value)
    if word[-1] & 1 == 0:
        return SlotClassification(ValueEncoding.SHORT, word[-1] // 2)
    return SlotClassification(ValueEncoding.LONG, (word_to_int(word) - 1) // 2)


def derive_continuation_slots(
    primary_slot_key: bytes, length: int
) -> List[PhysicalSlot]:
    """
    Enumerate every data slot of a long value, in ascending order.

    Args:
        primary_slot_key (bytes): The record's primary slot.
        length (int): Value length in bytes.

    Returns:
        List[PhysicalSlot]: ceil(length / 32) slots at keccak(primary) + i.
    """
    if length < 0:
        raise ValueError(f"Invalid value length: {length}")

    first_slot = word_to_int(keccak(to_bytes32(primary_slot_key)))
    total_slots = -(-length // WORD_SIZE)

    return [
        PhysicalSlot(
            slot_key=((first_slot + i) % UINT256_MOD).to_bytes(32, "big"),
            kind=SlotKind.CONTINUATION,
            sequence=i,
        )
        for i in range(total_slots)
    ]


def encode_storage_value(value: bytes) -> List[bytes]:
    """
    Lay out a value the way Solidity stores string/bytes.

    Returns the primary word followed by the continuation words (long form).
    """
    length = len(value)
    if length < WORD_SIZE:
        return [value.ljust(WORD_SIZE - 1, b"\x00") + bytes([length * 2])]

    words = [(length * 2 + 1).to_bytes(32, "big")]
    for offset in range(0, length, WORD_SIZE):
        words.append(value[offset : offset + WORD_SIZE].ljust(WORD_SIZE, b"\x00"))
    return words


def decode_storage_value(
    primary_value: HexLike, continuation_values: Sequence[HexLike] = ()
) -> bytes:
    """
    Rebuild a string/bytes value from its primary and continuation words.

    Raises:
        ValueError: If the number of continuation words does not match
            the length encoded in the primary word.
    """
    classification = classify_slot_value(primary_value)
    if classification.encoding is ValueEncoding.SHORT:
        if continuation_values:
            raise ValueError("Short value has no continuation slots")
        return to_bytes32(primary_value)[: classification.length]

    expected = classification.continuation_count
    if len(continuation_values) != expected:
        raise ValueError(
            f"Long value of {classification.length} bytes needs {expected} "
            f"continuation words, got {len(continuation_values)}"
        )
    data = b"".join(to_bytes32(word) for word in continuation_values)
    return data[: classification.length]
