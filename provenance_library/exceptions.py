"""Error types raised by provenance_library."""


class ProvenanceError(Exception):
    """Base class for library errors."""


class TrustCacheError(ProvenanceError):
    """Trust cache directory or metadata file could not be written."""


class ManifestStoreError(ProvenanceError, ValueError):
    """Engine output does not have the shape of a manifest store."""


class ProvenanceEngineError(ProvenanceError):
    """The provenance engine failed to read an asset."""


class AssetNotFoundError(ProvenanceError, FileNotFoundError):
    """The asset to sign does not exist on disk."""


class SignRequestError(ProvenanceError, ValueError):
    """A signing request is incomplete (e.g. local signer without key material)."""


class SigningError(ProvenanceError):
    """The provenance engine failed to sign an asset."""
