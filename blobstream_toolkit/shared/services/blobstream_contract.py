"""
Read-only wrapper around the Blobstream bridge contract.
"""

from typing import Tuple

import requests
from web3.exceptions import Web3Exception

from blobstream_toolkit.shared.exceptions import ContractCallError
from blobstream_toolkit.shared.services.web3_service import Web3Service

BLOBSTREAM_ABI = "blobstream"

# Failures of the call itself: transport, ABI encoding/decoding, reverts
_CALL_ERRORS = (Web3Exception, requests.RequestException, ValueError)


class BlobstreamContract:
    """Calls on one deployed Blobstream contract."""

    def __init__(self, web3_service: Web3Service, address: str):
        self.web3_service = web3_service
        self.address = address
        self.contract = web3_service.get_contract(address, BLOBSTREAM_ABI)

    def close(self) -> None:
        self.web3_service.close()

    def verify_attestation(
        self,
        nonce: int,
        data_root_tuple: Tuple[int, bytes],
        proof: Tuple[list, int, int],
    ) -> bool:
        """``verifyAttestation(nonce, tuple, proof)``; True only on explicit true."""
        try:
            result = self.contract.functions.verifyAttestation(
                nonce, data_root_tuple, proof
            ).call()
        except _CALL_ERRORS as e:
            raise ContractCallError(
                f"verifyAttestation call failed: {e}",
                context={"nonce": nonce, "contract": self.address},
            ) from e
        return result is True

    def data_root_tuple_root(self, nonce: int) -> bytes:
        """Root committed for ``nonce`` (zero bytes if none)."""
        try:
            root = self.contract.functions.state_dataRootTupleRoots(
                nonce
            ).call()
        except _CALL_ERRORS as e:
            raise ContractCallError(
                f"state_dataRootTupleRoots call failed: {e}",
                context={"nonce": nonce, "contract": self.address},
            ) from e
        return bytes(root)

    def latest_nonce(self) -> int:
        """Nonce of the most recent commitment (`state_eventNonce`)."""
        try:
            nonce = self.contract.functions.state_eventNonce().call()
        except _CALL_ERRORS as e:
            raise ContractCallError(
                f"state_eventNonce call failed: {e}",
                context={"contract": self.address},
            ) from e
        return int(nonce)
