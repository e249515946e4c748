"""
Shared pytest fixtures for provenanced test suite.

Provides fixtures for:
- Temporary storage directories
- Trust list cache managers backed by a mock remote host
- Controllable clocks
- Sample manifest store data
"""

import os
import tempfile
from collections.abc import Callable
from collections.abc import Generator
from datetime import UTC
from datetime import datetime
from datetime import timedelta
from pathlib import Path
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

# Keep the app's import-time config load away from the working directory
os.environ.setdefault("PROVENANCED_HOME", tempfile.mkdtemp(prefix="provenanced-test-"))

from provenance_library.config.settings import ServiceSettings  # noqa: E402
from provenance_library.trust import TrustListCacheManager  # noqa: E402

TRUST_BASE_URL = "https://trust.example.test/lists"
ADMIN_TOKEN = "s3cret-token"

TRUST_FILES = {
    "anchors.pem": "-----BEGIN CERTIFICATE-----\nANCHOR\n-----END CERTIFICATE-----\n",
    "allowed.pem": "-----BEGIN CERTIFICATE-----\nALLOWED\n-----END CERTIFICATE-----\n",
    "allowed.sha256.txt": "c2FtcGxlaGFzaA==\n",
    "store.cfg": "//id-kp-emailProtection\n1.3.6.1.5.5.7.3.4\n",
}


class FakeClock:
    """Manually advanced clock for schedule tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class TrustHost:
    """Mock remote trust list host.

    Serves TRUST_FILES, counts requests per file, and fails the files
    named in ``failing`` with the configured status code.
    """

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files = dict(files or TRUST_FILES)
        self.failing: set[str] = set()
        self.fail_status = 500
        self.timeout: set[str] = set()
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        name = request.url.path.rsplit("/", 1)[-1]
        self.requests.append(name)
        if name in self.timeout:
            raise httpx.ReadTimeout("timed out", request=request)
        if name in self.failing or name not in self.files:
            return httpx.Response(self.fail_status if name in self.files else 404, request=request)
        return httpx.Response(200, text=self.files[name], request=request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def count(self, name: str) -> int:
        return self.requests.count(name)


@pytest.fixture
def temp_storage_dir() -> Generator[Path, None, None]:
    """Create temporary storage directory for tests.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_storage_env(temp_storage_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point PROVENANCED_HOME at a temp directory.

    Args:
        temp_storage_dir: Temporary directory fixture
        monkeypatch: pytest monkeypatch fixture

    Returns:
        Path to temporary storage directory
    """
    monkeypatch.setenv("PROVENANCED_HOME", str(temp_storage_dir))
    monkeypatch.delenv("PROVENANCED_CONFIG_DIR", raising=False)
    monkeypatch.delenv("PROVENANCED_CACHE_DIR", raising=False)
    return temp_storage_dir


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock starting at 2025-01-01 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def trust_host() -> TrustHost:
    """Mock remote trust list host serving all four resources."""
    return TrustHost()


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Trust cache directory (not created in advance)."""
    return tmp_path / "trust"


@pytest.fixture
def make_manager(cache_dir: Path, trust_host: TrustHost, clock: FakeClock) -> Callable[..., TrustListCacheManager]:
    """Factory for cache managers wired to the mock host and clock."""

    def _make(**kwargs: Any) -> TrustListCacheManager:
        options: dict[str, Any] = {
            "cache_dir": cache_dir,
            "base_url": TRUST_BASE_URL,
            "refresh_interval": timedelta(days=1),
            "retry_interval": timedelta(minutes=5),
            "transport": trust_host.transport(),
            "clock": clock,
        }
        options.update(kwargs)
        return TrustListCacheManager(**options)

    return _make


@pytest.fixture
def manager(make_manager: Callable[..., TrustListCacheManager]) -> TrustListCacheManager:
    """Cache manager wired to the mock host and clock."""
    return make_manager()


def build_engine_store(
    validation_status: Any = "valid",
    manifests: dict[str, Any] | None = None,
    active: str | None = "urn:uuid:active",
    **extra: Any,
) -> dict[str, Any]:
    """Build a raw engine manifest store dictionary (snake_case keys)."""
    if manifests is None:
        manifests = {
            "urn:uuid:active": {
                "title": "photo.jpg",
                "format": "image/jpeg",
                "claim_generator": "test-camera/1.0",
                "signature_info": {"issuer": "Test CA", "time": "2024-12-20T10:00:00Z"},
                "assertions": [{"label": "c2pa.actions"}],
                "ingredients": [],
                "validation_status": [],
            }
        }
    data: dict[str, Any] = {"manifests": manifests, "validation_status": validation_status}
    if active is not None:
        data["active_manifest"] = active
    data.update(extra)
    return data


@pytest.fixture
def engine_store() -> Callable[..., dict[str, Any]]:
    """Builder for raw engine manifest store dictionaries."""
    return build_engine_store


@pytest.fixture
def trust_files() -> dict[str, str]:
    """Bodies served by the mock trust host, keyed by file name."""
    return dict(TRUST_FILES)


@pytest.fixture
def api_client(manager: TrustListCacheManager) -> Generator[TestClient, None, None]:
    """Test client with a trust manager backed by the mock trust host.

    Services are placed in app.state directly; the lifespan (which starts
    the background scheduler against the real trust host) is not run.
    """
    from provenanced.main import app

    app.state.settings = ServiceSettings(admin_token=ADMIN_TOKEN)
    app.state.trust_manager = manager
    yield TestClient(app)
    for key in ("settings", "trust_manager", "provenance_engine"):
        if hasattr(app.state, key):
            delattr(app.state, key)
