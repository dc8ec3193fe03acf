"""
Web3 Service module for the EVM chain hosting the Blobstream contract.

The service owns one HTTP session for the run. Calls are read-only
``eth_call``s; the provider's automatic retries are disabled so a failed
call surfaces immediately.
"""

from typing import Any, Dict, Optional, Tuple

import requests
from web3 import Web3

from blobstream_toolkit.shared.constants import NetworkConstants
from blobstream_toolkit.shared.services.resource_manager import (
    resource_manager,
)


class Web3Service:
    """
    A service class for managing a Web3 connection and contract handles.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = NetworkConstants.DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the Web3Service.

        Args:
            rpc_url (str): The RPC URL to use.
            timeout (float): Per-request timeout in seconds.
            session (requests.Session): Optional session to reuse.
        """
        self.rpc_url = rpc_url
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": NetworkConstants.USER_AGENT})
        self.w3 = self._initialize_web3(rpc_url, timeout)
        self._contract_cache: Dict[Tuple[str, str], Any] = {}
        self._closed = False

    def _initialize_web3(self, rpc_url: str, timeout: float) -> Web3:
        """Initialize Web3 over the service's own session, without retries"""
        provider = Web3.HTTPProvider(
            rpc_url,
            request_kwargs={"timeout": timeout},
            session=self._session,
            exception_retry_configuration=None,
        )
        return Web3(provider)

    def __enter__(self) -> "Web3Service":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._session.close()
            self._closed = True

    def get_contract(self, address: str, abi_name: str) -> Any:
        """Get a contract instance for a given address and ABI name"""
        key = (address.lower(), abi_name)
        if key not in self._contract_cache:
            abi = resource_manager.load_abi(abi_name)
            self._contract_cache[key] = self.w3.eth.contract(
                address=Web3.to_checksum_address(address.lower()), abi=abi
            )
        return self._contract_cache[key]
