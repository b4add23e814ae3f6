"""All constants for the project"""

import os

from dotenv import load_dotenv

load_dotenv()


class ResolverConstants:
    """Storage layout constants imposed by the L2 resolver contracts"""

    # Base slot of mapping(bytes32 node => mapping(string key => string value))
    TEXTS_SLOT_INDEX = 9

    # Solidity stores long string/bytes data in 32-byte words
    WORD_SIZE = 32

    # Upper bound on long values accepted from a node (4096 continuation slots)
    MAX_VALUE_LENGTH = 4096 * WORD_SIZE

    ZERO_WORD = b"\x00" * 32


class CommitmentChainConstants:
    """Constants for the L1 State Commitment Chain"""

    STATE_BATCH_APPENDED_SIGNATURE = (
        "StateBatchAppended(uint256,bytes32,uint256,uint256,bytes)"
    )
    APPEND_STATE_BATCH_SIGNATURE = "appendStateBatch(bytes32[],uint256)"

    # Optimism mainnet (legacy, pre-Bedrock) State Commitment Chain
    DEFAULT_ADDRESS = "0xBe5dAb4A2e9cd0F27300dB4aB94BeE3A233AEB19"


class GlobalConstants:
    """Global class constants and environment driven settings"""

    L1_RPC_URL = os.getenv("L1_RPC_URL")
    L2_RPC_URL = os.getenv("L2_RPC_URL")

    STATE_COMMITMENT_CHAIN = os.getenv(
        "STATE_COMMITMENT_CHAIN", CommitmentChainConstants.DEFAULT_ADDRESS
    )
    # Lower bound for StateBatchAppended log scans
    SCC_FROM_BLOCK = int(os.getenv("SCC_FROM_BLOCK", "0"))

    # Seconds allowed for each network-bound proof stage
    STAGE_TIMEOUT = float(os.getenv("L2P_STAGE_TIMEOUT", "60"))
    RPC_TIMEOUT = float(os.getenv("L2P_RPC_TIMEOUT", "30"))

    @staticmethod
    def get_rpc_url(layer: str):
        """Get the RPC URL for a layer ("l1" or "l2")"""
        return {
            "l1": GlobalConstants.L1_RPC_URL,
            "l2": GlobalConstants.L2_RPC_URL,
        }.get(layer.lower())
