"""
Web3 Service module for async access to the L1 and L2 nodes.

This module provides a Web3Service class wrapping an AsyncWeb3 connection,
caching contract instances, and answering the eth_getProof queries used
by the trie proof fetcher.
"""

from typing import Any, Dict, Optional, Sequence

import aiohttp
from eth_utils import to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3

from l2proof_toolkit.proofs.types import RawProofResponse
from l2proof_toolkit.shared.constants import GlobalConstants
from l2proof_toolkit.shared.services.resource_manager import (
    resource_manager,
)


class Web3Service:
    """
    A service class for managing one AsyncWeb3 connection.

    One instance is created per node (L1 and L2); instances hold no
    per-request state besides the contract cache.
    """

    def __init__(
        self,
        rpc_url: str,
        w3: AsyncWeb3 = None,
        request_timeout: Optional[float] = None,
    ):
        """
        Initialize the Web3Service.

        Args:
            rpc_url (str): The RPC URL to use.
            w3 (AsyncWeb3): Optional pre-built instance (tests, custom providers).
            request_timeout (float): Seconds allowed per HTTP request,
                defaults to GlobalConstants.RPC_TIMEOUT.
        """
        self.rpc_url = rpc_url
        self.request_timeout = (
            request_timeout
            if request_timeout is not None
            else GlobalConstants.RPC_TIMEOUT
        )
        if w3 is None:
            w3 = AsyncWeb3(
                AsyncHTTPProvider(
                    rpc_url,
                    request_kwargs={
                        "timeout": aiohttp.ClientTimeout(
                            total=self.request_timeout
                        )
                    },
                )
            )
        self.w3 = w3
        self._contract_cache: Dict[Any, Any] = {}

    def get_contract(self, address: str, abi_name: str) -> Any:
        """Get a contract instance for a given address and ABI name"""
        key = (address.lower(), abi_name)
        if key not in self._contract_cache:
            abi = resource_manager.load_abi(abi_name)
            self._contract_cache[key] = self.w3.eth.contract(
                address=to_checksum_address(address), abi=abi
            )
        return self._contract_cache[key]

    async def get_proof(
        self,
        account_address: str,
        slot_keys: Sequence[str],
        block_number: int,
    ) -> RawProofResponse:
        """
        Query eth_getProof at a pinned block number.

        Args:
            account_address (str): Account whose storage is proven.
            slot_keys (Sequence[str]): Hex encoded storage keys.
            block_number (int): Numeric block, never a tag like "latest".

        Returns:
            RawProofResponse: accountProof and storageProof entries.
        """
        proof = await self.w3.eth.get_proof(
            to_checksum_address(account_address),
            list(slot_keys),
            block_number,
        )
        return {
            "address": proof["address"],
            "accountProof": list(proof["accountProof"]),
            "storageProof": [dict(entry) for entry in proof["storageProof"]],
        }
