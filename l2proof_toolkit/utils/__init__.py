from .blockchain import (
    encode_rlp_witness,
    normalize_nodes,
    to_bytes32,
    to_hex,
    to_node_bytes,
    word_to_int,
)

__all__ = [
    "encode_rlp_witness",
    "normalize_nodes",
    "to_bytes32",
    "to_hex",
    "to_node_bytes",
    "word_to_int",
]
