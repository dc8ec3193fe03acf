"""
Test: a real blob verifies end to end against live endpoints.

Needs a DA node, an EVM RPC and the bridge address in the environment,
plus a known blob and the batch that covers it:

    BS_CELESTIA_RPC_URL, BS_EVM_RPC_URL, BS_CONTRACT_ADDRESS
    BS_TEST_TX_HASH, BS_TEST_BLOB_INDEX (default 0)
    BS_TEST_START_BLOCK, BS_TEST_END_BLOCK, BS_TEST_NONCE
"""

import os
from dataclasses import replace

import pytest

from blobstream_toolkit.shared.config import VerificationConfig
from blobstream_toolkit.shared.results import PipelineStage
from blobstream_toolkit.shared.services.blobstream_contract import (
    BlobstreamContract,
)
from blobstream_toolkit.shared.services.celestia_rpc import CelestiaRPCService
from blobstream_toolkit.shared.services.web3_service import Web3Service
from blobstream_toolkit.verification import BlobstreamVerifier, locate_blob

REQUIRED_ENV = (
    "BS_CELESTIA_RPC_URL",
    "BS_EVM_RPC_URL",
    "BS_CONTRACT_ADDRESS",
    "BS_TEST_TX_HASH",
    "BS_TEST_START_BLOCK",
    "BS_TEST_END_BLOCK",
    "BS_TEST_NONCE",
)

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        any(not os.getenv(name) for name in REQUIRED_ENV),
        reason="live Blobstream endpoints not configured",
    ),
]


@pytest.fixture(scope="module")
def live_config() -> VerificationConfig:
    return VerificationConfig.from_env(
        tx_hash=os.environ["BS_TEST_TX_HASH"],
        blob_index=int(os.getenv("BS_TEST_BLOB_INDEX", "0")),
        start_block=int(os.environ["BS_TEST_START_BLOCK"]),
        end_block=int(os.environ["BS_TEST_END_BLOCK"]),
        nonce=int(os.environ["BS_TEST_NONCE"]),
    )


class TestLiveVerification:
    """Full run against the configured network."""

    def test_blob_is_attested(self, live_config):
        with BlobstreamVerifier(live_config) as verifier:
            result = verifier.run()

        assert result.success, result.error
        report = result.data
        assert report.stage == PipelineStage.ATTESTED
        assert report.located.share_range.start >= 1

    def test_wrong_nonce_is_rejected(self, live_config):
        # the neighbouring nonce commits a different batch
        config = replace(live_config, nonce=live_config.nonce + 1)
        with BlobstreamVerifier(config) as verifier:
            result = verifier.run()

        assert not result.success
        assert result.error.source == "attestation"

    def test_share_range_matches_node_square(self, live_config):
        with CelestiaRPCService(live_config.celestia_rpc_url) as client:
            located = locate_blob(
                client, live_config.tx_hash, live_config.blob_index
            )
        assert located.share_range.end <= located.square_size ** 2

    def test_nonce_is_committed(self, live_config):
        with Web3Service(live_config.evm_rpc_url) as web3_service:
            bridge = BlobstreamContract(
                web3_service, live_config.contract_address
            )
            assert bridge.latest_nonce() >= live_config.nonce
            assert bridge.data_root_tuple_root(live_config.nonce) != bytes(32)
