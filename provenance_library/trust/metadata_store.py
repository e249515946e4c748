"""Metadata store for the trust list cache.

Stores the refresh schedule and per-resource state as a single JSON
record next to the cached resources.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path

from provenance_library.exceptions import TrustCacheError

from .models import CacheMetadata

logger = logging.getLogger(__name__)

METADATA_FILE_NAME = "metadata.json"


class CacheMetadataStore:
    """JSON-based store for trust cache metadata."""

    def __init__(self, cache_dir: Path) -> None:
        """Initialize metadata store.

        Args:
            cache_dir: Trust cache directory holding the metadata file
        """
        self.cache_dir = Path(cache_dir)
        self.path = self.cache_dir / METADATA_FILE_NAME

    def _save_json(self, path: Path, data: dict) -> None:
        """Save dict as JSON file atomically.

        Args:
            path: Target file path
            data: Dictionary to save as JSON

        Raises:
            TrustCacheError: If the file cannot be written
        """
        temp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp", delete=False
            ) as f:
                temp_name = f.name
                json.dump(data, f, indent=2, ensure_ascii=False)
            # Atomic rename
            os.replace(temp_name, path)
            logger.debug(f"Saved JSON to {path}")
        except OSError as e:
            if temp_name:
                with suppress(FileNotFoundError):
                    Path(temp_name).unlink()
            raise TrustCacheError(f"Failed to save JSON to {path}: {e}") from e

    def _load_json(self, path: Path) -> dict | None:
        """Load JSON file or return None if not found or unreadable.

        Args:
            path: File path to load

        Returns:
            Dictionary from JSON file, or None
        """
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load JSON from {path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring {path}: expected a JSON object")
            return None
        return data

    def load(self) -> CacheMetadata:
        """Load cache metadata.

        Returns:
            Stored metadata, or an empty record if the file is missing or corrupt
        """
        data = self._load_json(self.path)
        if not data:
            return CacheMetadata()
        try:
            return CacheMetadata.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed trust cache metadata {self.path}: {e}")
            return CacheMetadata()

    def save(self, metadata: CacheMetadata) -> None:
        """Replace the stored metadata record.

        Args:
            metadata: Metadata to persist

        Raises:
            TrustCacheError: If the record cannot be written
        """
        self._save_json(self.path, metadata.to_dict())
