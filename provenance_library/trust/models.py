"""Trust list cache models.

This module contains all data models for trust list caching:
- Resource descriptors derived from configuration
- Metadata models for persistent cache state
- Per-download results
- Status and contents models for API responses
"""

from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import Field

from provenance_library.models.base import CamelCaseModel

ALLOWED_CERTS = "allowedCerts"
ALLOWED_HASHES = "allowedHashes"
ANCHOR_CERTS = "anchorCerts"
STORE_CFG = "storeCfg"

RESOURCE_KEYS = (ALLOWED_CERTS, ALLOWED_HASHES, ANCHOR_CERTS, STORE_CFG)


def _dump_time(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _load_time(value: Any) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# =============================================================================
# Resource Descriptors
# =============================================================================


@dataclass(frozen=True)
class TrustResource:
    """One remote trust resource and where it is cached."""

    key: str
    file_name: str
    url: str
    path: Path


# =============================================================================
# Metadata Models
# =============================================================================


@dataclass
class CachedFileMetadata:
    """Persistent metadata about one cached trust resource."""

    path: Path
    url: str
    last_updated: datetime
    size: int

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "path": str(self.path),
            "url": self.url,
            "lastUpdated": _dump_time(self.last_updated),
            "size": self.size,
        }

    @classmethod
    def from_dict(cls, data: dict) -> CachedFileMetadata:
        """Load from dictionary."""
        return cls(
            path=Path(data["path"]),
            url=data["url"],
            last_updated=datetime.fromisoformat(data["lastUpdated"]),
            size=int(data.get("size", 0)),
        )


@dataclass
class CacheMetadata:
    """Persistent record of trust cache refresh state.

    ``last_updated``/``next_refresh_at`` only move on a full refresh.
    ``last_attempt_at``/``next_attempt_at`` record the most recent refresh
    attempt that did not fully succeed and gate the next retry.
    """

    last_updated: datetime | None = None
    next_refresh_at: datetime | None = None
    last_attempt_at: datetime | None = None
    next_attempt_at: datetime | None = None
    files: dict[str, CachedFileMetadata] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "lastUpdated": _dump_time(self.last_updated),
            "nextRefreshAt": _dump_time(self.next_refresh_at),
            "lastAttemptAt": _dump_time(self.last_attempt_at),
            "nextAttemptAt": _dump_time(self.next_attempt_at),
            "files": {key: info.to_dict() for key, info in self.files.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> CacheMetadata:
        """Load from dictionary."""
        return cls(
            last_updated=_load_time(data.get("lastUpdated")),
            next_refresh_at=_load_time(data.get("nextRefreshAt")),
            last_attempt_at=_load_time(data.get("lastAttemptAt")),
            next_attempt_at=_load_time(data.get("nextAttemptAt")),
            files={key: CachedFileMetadata.from_dict(info) for key, info in (data.get("files") or {}).items()},
        )

    @property
    def is_populated(self) -> bool:
        """Whether a full refresh has ever succeeded."""
        return self.last_updated is not None

    def is_due(self, now: datetime) -> bool:
        """Check whether a refresh should be attempted at ``now``."""
        if self.next_attempt_at is not None and now < self.next_attempt_at:
            return False
        if not self.is_populated or self.next_refresh_at is None:
            return True
        return now >= self.next_refresh_at


@dataclass
class FetchResult:
    """Outcome of downloading a single trust resource."""

    key: str
    success: bool
    size: int = 0
    error: str | None = None


# =============================================================================
# Status and Contents Models (API responses)
# =============================================================================


class TrustFileStatus(CamelCaseModel):
    """Status of one cached trust resource."""

    size: int = Field(
        ...,
        description="Size of the cached file in bytes",
    )
    last_updated: str | None = Field(
        None,
        description="When the file was last downloaded (ISO 8601)",
    )


class TrustListStatus(CamelCaseModel):
    """Trust list cache status for health and diagnostics."""

    enabled: bool = Field(
        ...,
        description="Whether trust list caching is enabled",
    )
    available: bool = Field(
        ...,
        description="Whether a full refresh has ever succeeded",
    )
    last_updated: str | None = Field(
        None,
        description="Time of the last full refresh (ISO 8601)",
    )
    next_refresh: str | None = Field(
        None,
        description="Time after which the next refresh is due (ISO 8601)",
    )
    refresh_in_progress: bool = Field(
        False,
        description="Whether a refresh cycle is currently running",
    )
    per_file_status: dict[str, TrustFileStatus] = Field(
        default_factory=dict,
        description="Status of each cached resource keyed by resource key",
    )


class TrustListContents(CamelCaseModel):
    """Raw contents of the four cached trust resources."""

    trust_anchors: str = Field(..., description="Anchor certificates (PEM)")
    allowed_list: str = Field(..., description="Allowed end-entity certificates (PEM)")
    allowed_hashes: str = Field(..., description="Allowed certificate hashes")
    trust_config: str = Field(..., description="Trust store configuration")

    def to_engine_options(self) -> dict[str, Any]:
        """Build provenance engine read options that enable trust verification."""
        return {
            "trust": self.to_camel_dict(),
            "verify": {
                "verifyTrust": True,
            },
        }
