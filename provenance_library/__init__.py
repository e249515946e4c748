"""Provenance library layer.

Business logic behind the provenanced daemon: trust list caching and
reduction of provenance engine output into validation reports.

Public Interface:
    Modules:
    - storage: Directory resolution
    - config: Configuration loading
    - models: Shared base models
    - trust: Trust list cache management
    - verification: Manifest store models, trust extraction and aggregation
"""

from .trust import TrustListCacheManager
from .verification import CertificateTrustExtractor
from .verification import VerificationAggregator

__all__ = [
    "TrustListCacheManager",
    "CertificateTrustExtractor",
    "VerificationAggregator",
]
