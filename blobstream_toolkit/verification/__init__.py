from blobstream_toolkit.verification.attestation import (
    reencode,
    verify_attestation,
)
from blobstream_toolkit.verification.batch_inclusion import (
    prove_batch_inclusion,
)
from blobstream_toolkit.verification.locator import locate_blob
from blobstream_toolkit.verification.manager import BlobstreamVerifier
from blobstream_toolkit.verification.share_inclusion import (
    verify_share_inclusion,
)
from blobstream_toolkit.verification.types import (
    BlobLocator,
    LocatedBlob,
    VerificationReport,
)

__all__ = [
    "BlobLocator",
    "BlobstreamVerifier",
    "LocatedBlob",
    "VerificationReport",
    "locate_blob",
    "prove_batch_inclusion",
    "reencode",
    "verify_attestation",
    "verify_share_inclusion",
]
