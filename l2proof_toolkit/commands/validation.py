from eth_utils import is_address, is_hex, to_checksum_address

from l2proof_toolkit.utils.blockchain import to_node_bytes


def validate_eth_address(address: str, param_name: str = "address") -> str:
    """Validate and return checksum ethereum address"""
    if not address or not isinstance(address, str):
        raise ValueError(
            f"Invalid {param_name}: address must be a non-empty string"
        )
    if not is_address(address):
        raise ValueError(
            f"Invalid {param_name}: {address} is not a valid Ethereum address"
        )
    return to_checksum_address(address)


def validate_node(node: str) -> bytes:
    """Validate a 32-byte hex node identifier (namehash)"""
    if not node or not is_hex(node) or len(node.removeprefix("0x")) != 64:
        raise ValueError(
            f"Invalid node: {node} must be a 0x-prefixed 32-byte hex string"
        )
    return to_node_bytes(node)


def validate_record_key(record_key: str) -> str:
    if not record_key:
        raise ValueError("Invalid record key: must be a non-empty string")
    return record_key


def validate_base_slot(base_slot: int) -> int:
    if base_slot < 0:
        raise ValueError(f"Invalid base slot: {base_slot} must be >= 0")
    return base_slot
