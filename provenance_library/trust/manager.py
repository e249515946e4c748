"""Trust list cache manager.

Keeps the four remote trust resources cached on disk with a time-to-live.
Refreshes download all resources in parallel; a resource that fails keeps
its previous cached copy, and the global schedule only advances when every
resource succeeded. Callers always prefer stale-but-present data over
failing. Only one refresh runs at a time: concurrent calls on a manager
join its in-flight cycle, and managers in other processes sharing the cache
directory wait on a lock file and reuse the cycle that finished meanwhile.
"""

from __future__ import annotations

import asyncio
import fcntl
import logging
from collections.abc import AsyncIterator
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from pathlib import Path

import httpx

from provenance_library.config.settings import ServiceSettings
from provenance_library.exceptions import TrustCacheError
from provenance_library.storage.paths import get_trust_cache_dir

from .fetcher import ResourceFetcher
from .metadata_store import CacheMetadataStore
from .models import ALLOWED_CERTS
from .models import ALLOWED_HASHES
from .models import ANCHOR_CERTS
from .models import RESOURCE_KEYS
from .models import STORE_CFG
from .models import CachedFileMetadata
from .models import CacheMetadata
from .models import FetchResult
from .models import TrustFileStatus
from .models import TrustListContents
from .models import TrustListStatus
from .models import TrustResource

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAMES = {
    ALLOWED_CERTS: "allowed.pem",
    ALLOWED_HASHES: "allowed.sha256.txt",
    ANCHOR_CERTS: "anchors.pem",
    STORE_CFG: "store.cfg",
}
LOCK_FILE_NAME = ".refresh.lock"
LOCK_POLL_INTERVAL = 0.05


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TrustListCacheManager:
    """Manages the local cache of remote trust list resources.

    Constructed once at startup and shared by the background scheduler and
    request handlers.
    """

    def __init__(
        self,
        cache_dir: Path,
        base_url: str,
        refresh_interval: timedelta = timedelta(days=1),
        retry_interval: timedelta = timedelta(minutes=5),
        download_timeout: float = 30.0,
        enabled: bool = True,
        file_names: dict[str, str] | None = None,
        fetcher: ResourceFetcher | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize cache manager.

        Args:
            cache_dir: Directory for cached resources and metadata
            base_url: Remote base URL the resources are fetched from
            refresh_interval: Time-to-live of a full refresh
            retry_interval: Minimum wait before retrying a refresh that did not fully succeed
            download_timeout: Per-resource download timeout in seconds
            enabled: Whether trust list caching is active
            file_names: Resource key to remote file name (defaults to the standard names)
            fetcher: Resource fetcher (default: ResourceFetcher())
            transport: Optional httpx transport (used by tests)
            clock: Returns the current time (default: UTC now)
        """
        self.cache_dir = Path(cache_dir)
        self.base_url = base_url.rstrip("/")
        self.refresh_interval = refresh_interval
        self.retry_interval = retry_interval
        self.download_timeout = download_timeout
        self.enabled = enabled
        self.fetcher = fetcher or ResourceFetcher()
        self.metadata_store = CacheMetadataStore(self.cache_dir)
        self._transport = transport
        self._clock = clock or _utcnow
        self._inflight: asyncio.Task[bool] | None = None
        # Set when a cycle could not persist its metadata
        self._retry_after: datetime | None = None

        names = {**DEFAULT_FILE_NAMES, **(file_names or {})}
        self.resources: dict[str, TrustResource] = {
            key: TrustResource(
                key=key,
                file_name=names[key],
                url=f"{self.base_url}/{names[key]}",
                path=self.cache_dir / names[key],
            )
            for key in RESOURCE_KEYS
        }

        logger.info(
            f"Initialized TrustListCacheManager (cache: {self.cache_dir}, source: {self.base_url}, "
            f"enabled: {self.enabled})"
        )

    @classmethod
    def from_settings(cls, settings: ServiceSettings, **kwargs) -> TrustListCacheManager:
        """Create a manager from service settings.

        Args:
            settings: Loaded service settings
            **kwargs: Extra constructor arguments (fetcher, transport, clock)

        Returns:
            Configured TrustListCacheManager
        """
        cache_dir = Path(settings.trust_cache_dir) if settings.trust_cache_dir else get_trust_cache_dir()
        return cls(
            cache_dir=cache_dir,
            base_url=settings.trust_base_url,
            refresh_interval=timedelta(seconds=settings.trust_refresh_interval_seconds),
            retry_interval=timedelta(seconds=settings.trust_retry_interval_seconds),
            download_timeout=settings.trust_download_timeout_seconds,
            enabled=settings.trust_enabled,
            file_names={
                ALLOWED_CERTS: settings.allowed_certs_file,
                ALLOWED_HASHES: settings.allowed_hashes_file,
                ANCHOR_CERTS: settings.anchor_certs_file,
                STORE_CFG: settings.store_cfg_file,
            },
            **kwargs,
        )

    @property
    def refresh_in_progress(self) -> bool:
        """Whether a refresh cycle is currently running."""
        return self._inflight is not None and not self._inflight.done()

    async def ensure_fresh(self) -> bool:
        """Refresh the cache if it is due.

        Returns:
            True if all four resources are cached and readable after the call
        """
        if not self.enabled:
            return False

        metadata = self.metadata_store.load()

        if self.refresh_in_progress:
            if self._is_usable(metadata):
                logger.debug("Trust list refresh in progress, serving cached copy")
                return True
            await self.refresh()
            return self._is_usable(self.metadata_store.load())

        now = self._clock()
        if self._retry_after is not None and now < self._retry_after:
            logger.debug(f"Trust cache metadata could not be saved, next attempt after {self._retry_after}")
            return self._is_usable(metadata)

        if not metadata.is_due(now):
            logger.debug("Trust lists are still valid, no refresh needed")
            return self._is_usable(metadata)

        updated = await self.refresh()
        if not updated:
            logger.warning("Failed to fully refresh trust lists, using existing ones if available")
        return self._is_usable(self.metadata_store.load())

    async def refresh(self) -> bool:
        """Download all trust resources in parallel.

        A call made while another refresh is running joins that refresh
        instead of starting a second one.

        Returns:
            True if all four resources were downloaded and metadata saved
        """
        if not self.enabled:
            logger.info("Trust list verification is disabled, skipping refresh")
            return False

        if self._inflight is None or self._inflight.done():
            seen_attempt = self.metadata_store.load().last_attempt_at
            self._inflight = asyncio.create_task(self._run_refresh(seen_attempt))
        else:
            logger.debug("Trust list refresh already in progress, joining it")

        return await asyncio.shield(self._inflight)

    @asynccontextmanager
    async def _refresh_lock(self) -> AsyncIterator[None]:
        """Hold an exclusive lock on the cache directory, shared across processes."""
        with open(self.cache_dir / LOCK_FILE_NAME, "a") as lock_file:
            while True:
                try:
                    fcntl.flock(lock_file, fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    await asyncio.sleep(LOCK_POLL_INTERVAL)
            try:
                yield
            finally:
                fcntl.flock(lock_file, fcntl.LOCK_UN)

    async def _run_refresh(self, seen_attempt: datetime | None) -> bool:
        """Run one refresh cycle under the cache lock.

        Args:
            seen_attempt: ``lastAttemptAt`` when the refresh was requested; if
                the stored value changed by the time the lock is held, another
                process completed a cycle and its outcome is reused
        """
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            async with self._refresh_lock():
                metadata = self.metadata_store.load()
                if metadata.last_attempt_at is not None and metadata.last_attempt_at != seen_attempt:
                    logger.info("Trust lists were refreshed by another process, reusing that result")
                    self._retry_after = None
                    return metadata.last_updated == metadata.last_attempt_at
                return await self._download_all()
        except OSError as e:
            logger.error(f"Failed to prepare trust cache directory {self.cache_dir}: {e}")
            self._retry_after = self._clock() + self.retry_interval
            return False

    async def _download_all(self) -> bool:
        """Download every resource and persist the resulting metadata."""
        now = self._clock()
        logger.info(f"Refreshing trust lists from {self.base_url}")

        async with httpx.AsyncClient(
            timeout=self.download_timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as client:
            outcomes = await asyncio.gather(
                *(self.fetcher.fetch(resource, client) for resource in self.resources.values()),
                return_exceptions=True,
            )

        results: list[FetchResult] = []
        for resource, outcome in zip(self.resources.values(), outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error(f"Unexpected error downloading {resource.url}: {outcome!r}")
                results.append(FetchResult(key=resource.key, success=False, error=repr(outcome)))
            else:
                results.append(outcome)

        metadata = self.metadata_store.load()
        for result in results:
            if result.success:
                resource = self.resources[result.key]
                metadata.files[result.key] = CachedFileMetadata(
                    path=resource.path,
                    url=resource.url,
                    last_updated=now,
                    size=result.size,
                )

        all_success = all(result.success for result in results)
        metadata.last_attempt_at = now
        if all_success:
            metadata.last_updated = now
            metadata.next_refresh_at = now + self.refresh_interval
            metadata.next_attempt_at = None
        else:
            metadata.next_attempt_at = now + self.retry_interval

        try:
            self.metadata_store.save(metadata)
        except TrustCacheError as e:
            self._retry_after = now + self.retry_interval
            logger.error(f"Failed to save trust cache metadata: {e}; next attempt after {self._retry_after}")
            return False
        self._retry_after = None

        if all_success:
            logger.info(f"Trust lists updated successfully, next refresh at {metadata.next_refresh_at.isoformat()}")
        else:
            failed = ", ".join(f"{r.key} ({r.error})" for r in results if not r.success)
            logger.warning(f"Trust list refresh incomplete, failed: {failed}; retry after {metadata.next_attempt_at}")
        return all_success

    def _is_usable(self, metadata: CacheMetadata) -> bool:
        """Check that every resource has been cached and is still on disk."""
        return all(key in metadata.files and self.resources[key].path.exists() for key in RESOURCE_KEYS)

    def _read_cached(self, key: str) -> str:
        """Read a cached resource as text; bytes that are not UTF-8 are replaced."""
        return self.resources[key].path.read_bytes().decode("utf-8", errors="replace")

    async def get_contents(self) -> TrustListContents | None:
        """Get the raw contents of the cached trust resources.

        Freshness is ensured best-effort first; a failed refresh falls back
        to whatever is cached.

        Returns:
            Contents of all four resources, or None if any has never been cached
        """
        if not self.enabled:
            return None

        try:
            await self.ensure_fresh()
        except Exception as e:
            logger.error(f"Trust list refresh failed, continuing with cached data: {e}", exc_info=True)

        metadata = self.metadata_store.load()
        missing = [key for key in RESOURCE_KEYS if key not in metadata.files]
        if missing:
            logger.warning(f"Trust list contents unavailable, never cached: {', '.join(missing)}")
            return None

        try:
            return TrustListContents(
                trust_anchors=self._read_cached(ANCHOR_CERTS),
                allowed_list=self._read_cached(ALLOWED_CERTS),
                allowed_hashes=self._read_cached(ALLOWED_HASHES),
                trust_config=self._read_cached(STORE_CFG),
            )
        except OSError as e:
            logger.error(f"Error reading trust list files: {e}")
            return None

    def get_status(self) -> TrustListStatus:
        """Get trust cache status without any network I/O.

        Returns:
            Status summary built from stored metadata
        """
        if not self.enabled:
            return TrustListStatus(enabled=False, available=False)

        metadata = self.metadata_store.load()
        return TrustListStatus(
            enabled=True,
            available=metadata.is_populated,
            last_updated=metadata.last_updated.isoformat() if metadata.last_updated else None,
            next_refresh=metadata.next_refresh_at.isoformat() if metadata.next_refresh_at else None,
            refresh_in_progress=self.refresh_in_progress,
            per_file_status={
                key: TrustFileStatus(size=info.size, last_updated=info.last_updated.isoformat())
                for key, info in metadata.files.items()
            },
        )
