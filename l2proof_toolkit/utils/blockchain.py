from typing import Iterable, List, Union

import rlp
from hexbytes import HexBytes

HexLike = Union[bytes, bytearray, str, int]
NodeLike = Union[bytes, bytearray, str]

UINT256_MOD = 2**256


def to_bytes32(value: HexLike) -> bytes:
    """Normalize a storage key/value (bytes, hex string or int) to a 32-byte word"""
    if isinstance(value, int):
        number = value
    else:
        raw = HexBytes(value)
        if len(raw) > 32:
            raise ValueError(f"Value exceeds 32 bytes: 0x{raw.hex()}")
        number = int.from_bytes(raw, byteorder="big")
    if not 0 <= number < UINT256_MOD:
        raise ValueError(f"Value out of uint256 range: {number}")
    return number.to_bytes(32, byteorder="big")


def to_node_bytes(value: NodeLike) -> bytes:
    """Parse a node identifier, which must be exactly 32 bytes (no padding)"""
    raw = bytes(HexBytes(value))
    if len(raw) != 32:
        raise ValueError(f"Node must be exactly 32 bytes, got {len(raw)}")
    return raw


def word_to_int(word: HexLike) -> int:
    """Interpret a storage word as a big-endian unsigned integer"""
    return int.from_bytes(to_bytes32(word), byteorder="big")


def to_hex(data: bytes) -> str:
    """Hex encode bytes with a 0x prefix"""
    return "0x" + bytes(data).hex()


def normalize_nodes(nodes: Iterable[HexLike]) -> List[bytes]:
    """Convert trie nodes returned by eth_getProof to raw bytes"""
    return [bytes(HexBytes(node)) for node in nodes]


def encode_rlp_witness(nodes: Iterable[HexLike]) -> bytes:
    """Encode a trie proof as an RLP list of the node byte strings"""
    return rlp.encode(normalize_nodes(nodes))
