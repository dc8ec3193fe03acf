"""Blobstream Toolkit - verify Celestia blobs against Blobstream attestations."""

__version__ = "0.1.0"

from .shared.config import VerificationConfig
from .verification import BlobstreamVerifier, VerificationReport

__all__ = ["BlobstreamVerifier", "VerificationConfig", "VerificationReport"]
