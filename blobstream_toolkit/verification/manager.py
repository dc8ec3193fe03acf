from typing import Any, Dict, Optional

from blobstream_toolkit.proofs.share_proof import ShareProof
from blobstream_toolkit.proofs.types import (
    Attestation,
    BinaryMerkleProof,
    InclusionProof,
)
from blobstream_toolkit.shared.config import VerificationConfig
from blobstream_toolkit.shared.exceptions import BlobstreamException
from blobstream_toolkit.shared.logging import format_context, get_logger
from blobstream_toolkit.shared.results import (
    PipelineStage,
    Result,
)
from blobstream_toolkit.shared.services.blobstream_contract import (
    BlobstreamContract,
)
from blobstream_toolkit.shared.services.celestia_rpc import CelestiaRPCService
from blobstream_toolkit.shared.services.web3_service import Web3Service
from blobstream_toolkit.verification.attestation import (
    reencode,
    verify_attestation,
)
from blobstream_toolkit.verification.batch_inclusion import (
    prove_batch_inclusion,
)
from blobstream_toolkit.verification.locator import locate_blob
from blobstream_toolkit.verification.share_inclusion import (
    verify_share_inclusion,
)
from blobstream_toolkit.verification.types import (
    LocatedBlob,
    VerificationReport,
)

_logger = get_logger(__name__)


class BlobstreamVerifier:
    """
    Runs the four verification stages for one blob.

    Stages run strictly in order, each consuming the previous stage's
    output. The first failure moves the run to FAILED and nothing after it
    runs. Both connections are released by ``close()``, which the context
    manager calls on every exit path.

    Usage:
        with BlobstreamVerifier(config) as verifier:
            result = verifier.run()
    """

    def __init__(
        self,
        config: VerificationConfig,
        celestia: Optional[CelestiaRPCService] = None,
        bridge: Optional[BlobstreamContract] = None,
    ):
        self.config = config
        self.attestation = Attestation(
            nonce=config.nonce,
            start_block=config.start_block,
            end_block=config.end_block,
        )
        self.celestia = celestia or CelestiaRPCService(
            config.celestia_rpc_url, config.http_timeout
        )
        try:
            self.bridge = bridge or BlobstreamContract(
                Web3Service(config.evm_rpc_url, config.http_timeout),
                config.contract_address,
            )
        except Exception:
            self.celestia.close()
            raise

        self.stage = PipelineStage.START
        self.failed_stage: Optional[str] = None
        self.failure: Optional[Result[Any]] = None
        self.located: Optional[LocatedBlob] = None
        self.share_proof: Optional[ShareProof] = None
        self.inclusion_proof: Optional[InclusionProof] = None
        self.binary_proof: Optional[BinaryMerkleProof] = None
        self._closed = False

    def __enter__(self) -> "BlobstreamVerifier":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close both connections. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self.celestia.close()
        finally:
            self.bridge.close()

    # ------------------------------------------------------------------
    # state machine
    # ------------------------------------------------------------------

    def _enter(self, source: str, required: PipelineStage) -> None:
        if self.stage != required:
            raise RuntimeError(
                f"cannot run {source} in state {self.stage.value}, "
                f"requires {required.value}"
            )

    def _advance(self, stage: PipelineStage) -> None:
        self.stage = stage

    def _fail(
        self,
        source: str,
        exception: BlobstreamException,
        context: Dict[str, Any],
    ) -> Result[Any]:
        self.stage = PipelineStage.FAILED
        self.failed_stage = source
        result: Result[Any] = Result.from_exception(source, exception, context)
        self.failure = result
        _logger.error(
            f"[{source}] {exception.kind}: {exception.message} "
            f"({format_context(context)})"
        )
        return result

    # ------------------------------------------------------------------
    # stages
    # ------------------------------------------------------------------

    def locate(self) -> Result[LocatedBlob]:
        """Stage 1: resolve the transaction to a block and share range."""
        source = "locate"
        self._enter(source, PipelineStage.START)
        context = {
            "tx_hash": self.config.tx_hash,
            "blob_index": self.config.blob_index,
        }
        _logger.info(f"[{source}] start {format_context(context)}")

        try:
            located = locate_blob(
                self.celestia, self.config.tx_hash, self.config.blob_index
            )
        except BlobstreamException as e:
            return self._fail(source, e, context)

        self.located = located
        self._advance(PipelineStage.LOCATED)
        _logger.info(
            f"[{source}] height={located.locator.block_height} "
            f"tx_index={located.locator.tx_index} "
            f"shares=[{located.share_range.start}, {located.share_range.end})"
        )
        return Result.ok(located)

    def verify_shares(self) -> Result[ShareProof]:
        """Stage 2: prove the share range against the block's data root."""
        source = "share_inclusion"
        self._enter(source, PipelineStage.LOCATED)
        located = self.located
        context = {
            "tx_hash": self.config.tx_hash,
            "height": located.locator.block_height,
            "share_start": located.share_range.start,
            "share_end": located.share_range.end,
        }
        _logger.info(f"[{source}] start {format_context(context)}")

        try:
            proof = verify_share_inclusion(
                self.celestia,
                located.locator.block_height,
                located.share_range,
                located.block.data_root,
            )
        except BlobstreamException as e:
            return self._fail(source, e, context)

        self.share_proof = proof
        self._advance(PipelineStage.SHARE_VERIFIED)
        _logger.info(
            f"[{source}] {proof.share_count} shares verified across "
            f"rows [{proof.row_proof.start_row}, {proof.row_proof.end_row}]"
        )
        return Result.ok(proof)

    def prove_batch(self) -> Result[InclusionProof]:
        """Stage 3: fetch the data root's proof of inclusion in the batch."""
        source = "batch_inclusion"
        self._enter(source, PipelineStage.SHARE_VERIFIED)
        height = self.located.locator.block_height
        context = {
            "tx_hash": self.config.tx_hash,
            "height": height,
            **self.attestation.to_dict(),
        }
        _logger.info(f"[{source}] start {format_context(context)}")

        try:
            proof = prove_batch_inclusion(
                self.celestia, height, self.attestation
            )
        except BlobstreamException as e:
            return self._fail(source, e, context)

        self.inclusion_proof = proof
        self._advance(PipelineStage.BATCH_PROVED)
        _logger.info(
            f"[{source}] leaf {proof.index} of {proof.total} with "
            f"{len(proof.aunts)} aunts"
        )
        return Result.ok(proof)

    def attest(self) -> Result[bool]:
        """Stage 4: check the tuple on-chain under the configured nonce."""
        source = "attestation"
        self._enter(source, PipelineStage.BATCH_PROVED)
        data_root_tuple = self.located.data_root_tuple
        context = {
            "tx_hash": self.config.tx_hash,
            "height": data_root_tuple.height,
            "nonce": self.attestation.nonce,
            "contract": self.config.contract_address,
        }
        _logger.info(f"[{source}] start {format_context(context)}")

        try:
            self.binary_proof = reencode(self.inclusion_proof)
            verify_attestation(
                self.bridge,
                self.attestation.nonce,
                data_root_tuple,
                self.binary_proof,
            )
        except BlobstreamException as e:
            return self._fail(source, e, context)

        self._advance(PipelineStage.ATTESTED)
        _logger.info(
            f"[{source}] height {data_root_tuple.height} attested under "
            f"nonce {self.attestation.nonce}"
        )
        return Result.ok(True)

    # ------------------------------------------------------------------
    # full run
    # ------------------------------------------------------------------

    def run(self) -> Result[VerificationReport]:
        """
        Run every stage in order, stopping at the first failure.

        Returns:
            Result[VerificationReport]: the report is attached on success
            and on failure; only a run that reached ATTESTED succeeds
        """
        for step in (
            self.locate,
            self.verify_shares,
            self.prove_batch,
            self.attest,
        ):
            result = step()
            if not result.success:
                return Result(
                    success=False, data=self.report(), errors=result.errors
                )
        return Result.ok(self.report())

    def report(self) -> VerificationReport:
        """Snapshot of what the run has produced so far."""
        error = None
        if self.failure is not None and self.failure.error is not None:
            error = self.failure.error.to_dict()
        return VerificationReport(
            tx_hash=self.config.tx_hash,
            stage=self.stage,
            valid=self.stage == PipelineStage.ATTESTED,
            attestation=self.attestation,
            located=self.located,
            share_proof=self.share_proof,
            inclusion_proof=self.inclusion_proof,
            binary_proof=self.binary_proof,
            failed_stage=self.failed_stage,
            error=error,
        )
