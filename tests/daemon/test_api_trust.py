"""
Integration tests for trust list API endpoints.

Tests status reporting and the token-protected manual refresh.
"""

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from provenance_library.config.settings import ServiceSettings
from provenance_library.trust import TrustListCacheManager
from provenanced.main import app

ADMIN_TOKEN = "s3cret-token"


@pytest.mark.integration
class TestTrustStatusAPI:
    """Test GET /api/trust/status."""

    def test_status_before_refresh(self, api_client: TestClient) -> None:
        """Test status of an empty cache."""
        response = api_client.get("/api/trust/status")

        assert response.status_code == 200
        data = response.json()
        assert data["enabled"] is True
        assert data["available"] is False
        assert data["lastUpdated"] is None
        assert data["perFileStatus"] == {}

    def test_status_after_update(self, api_client: TestClient) -> None:
        """Test status reflects a completed refresh."""
        api_client.post("/api/trust/update", headers={"X-Admin-Token": ADMIN_TOKEN})

        data = api_client.get("/api/trust/status").json()

        assert data["available"] is True
        assert set(data["perFileStatus"]) == {"allowedCerts", "allowedHashes", "anchorCerts", "storeCfg"}
        assert data["refreshInProgress"] is False

    def test_status_without_manager(self) -> None:
        """Test 503 when the cache manager was never initialized."""
        response = TestClient(app).get("/api/trust/status")

        assert response.status_code == 503


@pytest.mark.integration
class TestTrustUpdateAPI:
    """Test POST /api/trust/update."""

    def test_update_with_valid_token(self, api_client: TestClient, trust_host) -> None:
        """Test a valid token triggers a full refresh."""
        response = api_client.post("/api/trust/update", headers={"X-Admin-Token": ADMIN_TOKEN})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["status"]["available"] is True
        assert len(trust_host.requests) == 4

    def test_update_without_token(self, api_client: TestClient, trust_host) -> None:
        """Test a missing token is refused."""
        response = api_client.post("/api/trust/update")

        assert response.status_code == 403
        assert trust_host.requests == []

    def test_update_with_wrong_token(self, api_client: TestClient) -> None:
        """Test a wrong token is refused."""
        response = api_client.post("/api/trust/update", headers={"X-Admin-Token": "guess"})

        assert response.status_code == 403

    def test_update_refused_when_no_token_configured(self, api_client: TestClient) -> None:
        """Test the endpoint is closed when no admin token is configured."""
        app.state.settings = ServiceSettings(admin_token=None)

        response = api_client.post("/api/trust/update", headers={"X-Admin-Token": ""})

        assert response.status_code == 403

    def test_update_when_disabled(
        self,
        api_client: TestClient,
        make_manager: Callable[..., TrustListCacheManager],
    ) -> None:
        """Test 400 when trust lists are disabled."""
        app.state.trust_manager = make_manager(enabled=False)

        response = api_client.post("/api/trust/update", headers={"X-Admin-Token": ADMIN_TOKEN})

        assert response.status_code == 400

    def test_partial_update_reports_failure(self, api_client: TestClient, trust_host) -> None:
        """Test an incomplete refresh is reported as unsuccessful."""
        trust_host.failing.add("allowed.pem")

        response = api_client.post("/api/trust/update", headers={"X-Admin-Token": ADMIN_TOKEN})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is False
        assert data["status"]["available"] is False
