"""
Verification run configuration.

Everything a run needs is carried by one ``VerificationConfig`` that is
handed to the pipeline constructor; there is no module-level mutable
state. Endpoints and the bridge address may come from the environment
(optionally through a ``.env`` file), the per-run identifiers come from
the caller.
"""

import os
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address

from blobstream_toolkit.shared.constants import NetworkConstants
from blobstream_toolkit.shared.exceptions import ConfigurationException

_TX_HASH_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")

ENV_CELESTIA_RPC_URL = "BS_CELESTIA_RPC_URL"
ENV_EVM_RPC_URL = "BS_EVM_RPC_URL"
ENV_CONTRACT_ADDRESS = "BS_CONTRACT_ADDRESS"
ENV_HTTP_TIMEOUT = "BS_HTTP_TIMEOUT"


@dataclass(frozen=True)
class VerificationConfig:
    """
    Inputs of one verification run.

    Attributes:
        tx_hash: Hex digest of the DA transaction carrying the blob
        blob_index: Index of the blob inside that transaction
        celestia_rpc_url: DA node RPC endpoint
        evm_rpc_url: EVM chain RPC endpoint
        contract_address: Blobstream bridge contract address
        start_block: First height of the committed batch (inclusive)
        end_block: Last height of the committed batch (exclusive)
        nonce: Attestation nonce of the batch commitment
        http_timeout: Per-request timeout in seconds for both endpoints
    """

    tx_hash: str
    blob_index: int
    celestia_rpc_url: str
    evm_rpc_url: str
    contract_address: str
    start_block: int
    end_block: int
    nonce: int
    http_timeout: float = NetworkConstants.DEFAULT_HTTP_TIMEOUT

    def __post_init__(self):
        if not _TX_HASH_RE.match(self.tx_hash or ""):
            raise ConfigurationException(
                f"Invalid tx_hash: {self.tx_hash!r} is not a 32-byte hex digest"
            )
        if self.blob_index < 0:
            raise ConfigurationException(
                f"Invalid blob_index: {self.blob_index} must be >= 0"
            )
        if not self.celestia_rpc_url:
            raise ConfigurationException(
                f"Celestia RPC URL is not set (flag or {ENV_CELESTIA_RPC_URL})"
            )
        if not self.evm_rpc_url:
            raise ConfigurationException(
                f"EVM RPC URL is not set (flag or {ENV_EVM_RPC_URL})"
            )
        if not self.contract_address or not is_address(self.contract_address):
            raise ConfigurationException(
                f"Invalid contract_address: {self.contract_address!r}"
            )
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(
            self, "contract_address", to_checksum_address(self.contract_address)
        )
        if self.start_block < 1 or self.start_block >= self.end_block:
            raise ConfigurationException(
                f"Invalid batch range [{self.start_block}, {self.end_block})"
            )
        if self.nonce < 1:
            raise ConfigurationException(
                f"Invalid nonce: {self.nonce} must be >= 1"
            )
        if self.http_timeout <= 0:
            raise ConfigurationException(
                f"Invalid http_timeout: {self.http_timeout}"
            )

    @classmethod
    def from_env(
        cls,
        tx_hash: str,
        blob_index: int,
        start_block: int,
        end_block: int,
        nonce: int,
        celestia_rpc_url: Optional[str] = None,
        evm_rpc_url: Optional[str] = None,
        contract_address: Optional[str] = None,
        http_timeout: Optional[float] = None,
    ) -> "VerificationConfig":
        """Build a config, filling unset endpoints from the environment."""
        load_dotenv()
        if http_timeout is None:
            raw_timeout = os.getenv(
                ENV_HTTP_TIMEOUT, str(NetworkConstants.DEFAULT_HTTP_TIMEOUT)
            )
            try:
                http_timeout = float(raw_timeout)
            except ValueError:
                raise ConfigurationException(
                    f"Invalid {ENV_HTTP_TIMEOUT}: {raw_timeout!r}"
                )

        return cls(
            tx_hash=tx_hash,
            blob_index=blob_index,
            celestia_rpc_url=celestia_rpc_url
            or os.getenv(ENV_CELESTIA_RPC_URL, ""),
            evm_rpc_url=evm_rpc_url or os.getenv(ENV_EVM_RPC_URL, ""),
            contract_address=contract_address
            or os.getenv(ENV_CONTRACT_ADDRESS, ""),
            start_block=start_block,
            end_block=end_block,
            nonce=nonce,
            http_timeout=http_timeout,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
