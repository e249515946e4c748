"""Trust list cache management.

This module provides local caching of the remote trust resources used to
judge signing certificates:
- Resource download (ResourceFetcher)
- Metadata persistence (CacheMetadataStore)
- Refresh orchestration, contents and status (TrustListCacheManager)
"""

# Services
from .fetcher import ResourceFetcher
from .manager import TrustListCacheManager
from .metadata_store import CacheMetadataStore

# Models - Metadata
from .models import CachedFileMetadata
from .models import CacheMetadata
from .models import FetchResult
from .models import TrustResource

# Models - Status and Contents (API responses)
from .models import TrustFileStatus
from .models import TrustListContents
from .models import TrustListStatus

# Resource keys
from .models import ALLOWED_CERTS
from .models import ALLOWED_HASHES
from .models import ANCHOR_CERTS
from .models import RESOURCE_KEYS
from .models import STORE_CFG

__all__ = [
    # Services
    "ResourceFetcher",
    "CacheMetadataStore",
    "TrustListCacheManager",
    # Metadata models
    "CacheMetadata",
    "CachedFileMetadata",
    "FetchResult",
    "TrustResource",
    # Status and contents models
    "TrustFileStatus",
    "TrustListStatus",
    "TrustListContents",
    # Resource keys
    "ALLOWED_CERTS",
    "ALLOWED_HASHES",
    "ANCHOR_CERTS",
    "STORE_CFG",
    "RESOURCE_KEYS",
]
