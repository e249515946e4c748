"""Download of individual trust resources.

A fetch never raises for network or write problems: every failure is
reported through the returned FetchResult so that one resource cannot
abort the others in a refresh cycle.
"""

from __future__ import annotations

import logging
import os
import tempfile
from contextlib import suppress
from pathlib import Path

import httpx

from .models import FetchResult
from .models import TrustResource

logger = logging.getLogger(__name__)


def write_bytes_atomic(path: Path, content: bytes) -> int:
    """Write bytes to path via a uniquely named temporary file and rename.

    Args:
        path: Destination file
        content: Body to store unchanged

    Returns:
        Size of the written file in bytes
    """
    temp_name: str | None = None
    try:
        with tempfile.NamedTemporaryFile(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False) as f:
            temp_name = f.name
            f.write(content)
        os.replace(temp_name, path)
    except Exception:
        if temp_name:
            with suppress(FileNotFoundError):
                Path(temp_name).unlink()
        raise
    return len(content)


class ResourceFetcher:
    """Fetches trust resources over HTTP and persists them to the cache."""

    async def fetch(self, resource: TrustResource, client: httpx.AsyncClient) -> FetchResult:
        """Download one resource and store its body verbatim at ``resource.path``.

        Args:
            resource: Resource to download
            client: HTTP client (carries the download timeout)

        Returns:
            Result with success flag and stored size
        """
        logger.debug(f"Downloading trust resource {resource.key} from {resource.url}")
        try:
            response = await client.get(resource.url)
            response.raise_for_status()
            content = response.content
        except httpx.TimeoutException:
            logger.warning(f"Timed out downloading {resource.url}")
            return FetchResult(key=resource.key, success=False, error="timeout")
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP {e.response.status_code} downloading {resource.url}")
            return FetchResult(key=resource.key, success=False, error=f"HTTP {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Failed to download {resource.url}: {e}")
            return FetchResult(key=resource.key, success=False, error=str(e) or type(e).__name__)

        try:
            size = write_bytes_atomic(resource.path, content)
        except OSError as e:
            logger.error(f"Failed to write trust resource {resource.path}: {e}")
            return FetchResult(key=resource.key, success=False, error=f"write failed: {e}")

        logger.info(f"Downloaded {resource.key} ({size} bytes) to {resource.path}")
        return FetchResult(key=resource.key, success=True, size=size)
