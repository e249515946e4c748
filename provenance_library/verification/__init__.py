"""Provenance verification.

This module reduces provenance engine output into caller-facing results:
- Engine output and report models
- Finding classification rules
- Certificate trust verdicts (CertificateTrustExtractor)
- Report aggregation (VerificationAggregator)
- Manifest and signer construction for signing
- Verify, read and sign flows (VerificationService)
"""

# Services
from .aggregator import VerificationAggregator
from .service import ProvenanceEngine
from .service import VerificationService
from .trust_extractor import CertificateTrustExtractor

# Models - Engine output
from .models import Ingredient
from .models import Manifest
from .models import ManifestStore
from .models import SignatureInfo
from .models import ValidationStatusEntry

# Models - Reports and responses
from .models import ActiveManifestSnapshot
from .models import Asset
from .models import FailureDetails
from .models import ManifestInfo
from .models import ManifestStoreSummary
from .models import ReadResponse
from .models import TrustVerdict

# Models - Signing
from .models import ManifestData
from .models import PemFile
from .models import SignAssetRequest
from .models import SignerConfig
from .models import SignRequest
from .models import SignResponse
from .models import ValidationReport
from .models import VerifyResponse

__all__ = [
    # Services
    "CertificateTrustExtractor",
    "VerificationAggregator",
    "VerificationService",
    "ProvenanceEngine",
    # Engine output models
    "ManifestStore",
    "Manifest",
    "Ingredient",
    "SignatureInfo",
    "ValidationStatusEntry",
    # Report and response models
    "ActiveManifestSnapshot",
    "Asset",
    "FailureDetails",
    "ManifestInfo",
    "ManifestStoreSummary",
    "ReadResponse",
    "TrustVerdict",
    "ValidationReport",
    "VerifyResponse",
    # Signing models
    "ManifestData",
    "PemFile",
    "SignAssetRequest",
    "SignerConfig",
    "SignRequest",
    "SignResponse",
]
