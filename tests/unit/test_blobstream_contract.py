"""
Unit tests for the Blobstream contract wrapper and the Web3 service.
"""

from unittest.mock import MagicMock

import pytest
import requests
from web3.exceptions import ContractLogicError

from blobstream_toolkit.shared.exceptions import ContractCallError
from blobstream_toolkit.shared.services.blobstream_contract import (
    BLOBSTREAM_ABI,
    BlobstreamContract,
)
from blobstream_toolkit.shared.services.web3_service import Web3Service

CONTRACT = "0x046120e6c6c48c05627fb369756f5f44858950a5"


@pytest.fixture
def contract():
    return MagicMock()


@pytest.fixture
def bridge(contract):
    web3_service = MagicMock()
    web3_service.get_contract.return_value = contract
    return BlobstreamContract(web3_service, CONTRACT)


def _returns(contract, function_name, value):
    getattr(contract.functions, function_name).return_value.call.return_value = (
        value
    )


def _raises(contract, function_name, exc):
    getattr(contract.functions, function_name).return_value.call.side_effect = (
        exc
    )


class TestBlobstreamContract:
    def test_loads_blobstream_abi(self, bridge):
        bridge.web3_service.get_contract.assert_called_once_with(
            CONTRACT, BLOBSTREAM_ABI
        )

    def test_verify_attestation_true(self, bridge, contract):
        _returns(contract, "verifyAttestation", True)
        tuple_arg = (102, b"\x01" * 32)
        proof_arg = ([b"\x02" * 32], 2, 4)

        assert bridge.verify_attestation(7, tuple_arg, proof_arg) is True
        contract.functions.verifyAttestation.assert_called_once_with(
            7, tuple_arg, proof_arg
        )

    @pytest.mark.parametrize("answer", [False, None, 1, "true"])
    def test_only_explicit_true_counts(self, bridge, contract, answer):
        _returns(contract, "verifyAttestation", answer)
        assert bridge.verify_attestation(7, (1, bytes(32)), ([], 0, 1)) is False

    @pytest.mark.parametrize(
        "exc",
        [
            ContractLogicError("execution reverted"),
            requests.ConnectionError("refused"),
            ValueError("could not decode"),
        ],
    )
    def test_call_failures_are_wrapped(self, bridge, contract, exc):
        _raises(contract, "verifyAttestation", exc)
        with pytest.raises(ContractCallError) as exc_info:
            bridge.verify_attestation(7, (1, bytes(32)), ([], 0, 1))
        assert exc_info.value.context["nonce"] == 7
        assert exc_info.value.__cause__ is exc

    def test_data_root_tuple_root(self, bridge, contract):
        _returns(contract, "state_dataRootTupleRoots", b"\xaa" * 32)
        assert bridge.data_root_tuple_root(7) == b"\xaa" * 32
        contract.functions.state_dataRootTupleRoots.assert_called_once_with(7)

    def test_latest_nonce_is_event_nonce(self, bridge, contract):
        _returns(contract, "state_eventNonce", 9)
        assert bridge.latest_nonce() == 9
        contract.functions.state_eventNonce.assert_called_once_with()
        contract.functions.state_proofNonce.assert_not_called()

    def test_latest_nonce_failure(self, bridge, contract):
        _raises(contract, "state_eventNonce", requests.Timeout("slow"))
        with pytest.raises(ContractCallError, match="state_eventNonce"):
            bridge.latest_nonce()

    def test_close_closes_service(self, bridge):
        bridge.close()
        bridge.web3_service.close.assert_called_once()


class TestWeb3Service:
    def test_contract_is_cached_per_address(self):
        service = Web3Service("http://evm.invalid:8545", timeout=3)
        first = service.get_contract(CONTRACT, BLOBSTREAM_ABI)
        second = service.get_contract(CONTRACT.upper().replace("0X", "0x"), BLOBSTREAM_ABI)
        assert first is second
        assert first.address.lower() == CONTRACT
        service.close()

    def test_abi_has_the_called_functions(self):
        service = Web3Service("http://evm.invalid:8545")
        contract = service.get_contract(CONTRACT, BLOBSTREAM_ABI)
        for name in (
            "verifyAttestation",
            "state_dataRootTupleRoots",
            "state_eventNonce",
        ):
            assert hasattr(contract.functions, name)
        service.close()

    def test_abi_is_a_single_contract_variant(self):
        service = Web3Service("http://evm.invalid:8545")
        contract = service.get_contract(CONTRACT, BLOBSTREAM_ABI)
        names = {entry["name"] for entry in contract.abi}
        assert not names & {"state_proofNonce", "state_dataCommitments"}
        service.close()

    def test_close_is_idempotent_and_closes_session(self):
        session = MagicMock(spec=requests.Session)
        session.headers = {}
        service = Web3Service("http://evm.invalid:8545", session=session)
        with service:
            pass
        service.close()
        assert service.closed
        session.close.assert_called_once()
        assert "User-Agent" in session.headers
