"""
Integration tests for provenance verify, read and sign endpoints.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from provenanced.main import app

BODY = {"path": "/uploads/photo.jpg", "mimeType": "image/jpeg"}


class CannedEngine:
    """Engine returning a fixed manifest store."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.assets = []

    def read(self, asset, options=None):
        self.assets.append(asset)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.integration
class TestVerifyAPI:
    """Test POST /api/c2pa/verify."""

    def test_no_engine_returns_503(self, api_client: TestClient) -> None:
        """Test verification is unavailable without an engine."""
        response = api_client.post("/api/c2pa/verify", json=BODY)

        assert response.status_code == 503

    def test_verify_returns_report(self, api_client: TestClient, engine_store: Callable[..., dict]) -> None:
        """Test a readable asset returns a camelCase report."""
        engine = CannedEngine(engine_store("invalid"))
        app.state.provenance_engine = engine

        response = api_client.post("/api/c2pa/verify", json=BODY)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["hasC2pa"] is True
        assert data["isValid"] is False
        details = data["validationDetails"]
        assert details["status"] == "invalid"
        assert details["manifestStore"]["manifestsCount"] == 1
        assert "certificateTrust" in details
        assert engine.assets[0].mime_type == "image/jpeg"

    def test_verify_without_provenance(self, api_client: TestClient) -> None:
        """Test an asset with no manifest."""
        app.state.provenance_engine = CannedEngine(None)

        data = api_client.post("/api/c2pa/verify", json=BODY).json()

        assert data["hasC2pa"] is False
        assert data["validationDetails"]["status"] == "invalid"
        assert len(data["validationDetails"]["errors"]) == 1

    def test_verify_engine_failure(self, api_client: TestClient) -> None:
        """Test engine errors become a hasC2pa=false response, not a 500."""
        app.state.provenance_engine = CannedEngine(error=RuntimeError("corrupt JUMBF box"))

        response = api_client.post("/api/c2pa/verify", json=BODY)

        assert response.status_code == 200
        assert response.json()["hasC2pa"] is False
        assert "corrupt JUMBF box" not in response.text

    def test_verify_requires_mime_type(self, api_client: TestClient) -> None:
        """Test request validation."""
        app.state.provenance_engine = CannedEngine(None)

        response = api_client.post("/api/c2pa/verify", json={"path": "/uploads/photo.jpg"})

        assert response.status_code == 422


@pytest.mark.integration
class TestReadAPI:
    """Test POST /api/c2pa/read."""

    def test_read_returns_manifest(self, api_client: TestClient, engine_store: Callable[..., dict]) -> None:
        """Test the parsed manifest store is returned."""
        app.state.provenance_engine = CannedEngine(engine_store())

        data = api_client.post("/api/c2pa/read", json=BODY).json()

        assert data["hasC2pa"] is True
        assert data["manifest"]["activeManifestLabel"] == "urn:uuid:active"

    def test_read_no_engine_returns_503(self, api_client: TestClient) -> None:
        """Test reading is unavailable without an engine."""
        assert api_client.post("/api/c2pa/read", json=BODY).status_code == 503


class SigningCannedEngine(CannedEngine):
    """Engine that writes a signed copy or raises a given error."""

    def __init__(self, sign_error: Exception | None = None) -> None:
        super().__init__()
        self.sign_error = sign_error
        self.manifests = []

    def sign(self, asset, manifest, signer, output_path):
        self.manifests.append(manifest)
        if self.sign_error is not None:
            raise self.sign_error
        Path(output_path).write_bytes(b"signed")


@pytest.fixture
def sign_body(tmp_path: Path) -> dict[str, Any]:
    """Sign request body for a JPEG on disk."""
    photo = tmp_path / "photo.jpg"
    photo.write_bytes(b"\xff\xd8\xff\xe0")
    return {
        "path": str(photo),
        "mimeType": "image/jpeg",
        "manifestData": {"title": "photo.jpg", "copyright": "CC-BY-4.0", "assertions": []},
    }


@pytest.mark.integration
class TestSignAPI:
    """Test POST /api/c2pa/sign."""

    def test_sign_returns_output_path(self, api_client: TestClient, sign_body: dict[str, Any]) -> None:
        """Test a signed copy is written and reported in camelCase."""
        engine = SigningCannedEngine()
        app.state.provenance_engine = engine

        response = api_client.post("/api/c2pa/sign", json=sign_body)

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["signer"] == "test"
        assert Path(data["outputPath"]).read_bytes() == b"signed"
        assert engine.manifests[0]["claim_generator"] == "c2pa-web-app/1.0.0"
        assert engine.manifests[0]["assertions"] == [{"label": "dc.rights", "data": {"value": "CC-BY-4.0"}}]

    def test_local_signer_without_key_is_400(self, api_client: TestClient, sign_body: dict[str, Any]) -> None:
        """Test local signing requires a certificate and private key."""
        app.state.provenance_engine = SigningCannedEngine()
        sign_body["useLocalSigner"] = True
        sign_body["certificate"] = {"name": "cert.pem", "content": "-----BEGIN CERTIFICATE-----"}

        response = api_client.post("/api/c2pa/sign", json=sign_body)

        assert response.status_code == 400
        assert "private key" in response.json()["detail"]

    def test_missing_asset_is_404(self, api_client: TestClient, sign_body: dict[str, Any]) -> None:
        """Test signing a file that does not exist."""
        app.state.provenance_engine = SigningCannedEngine()
        sign_body["path"] = str(Path(sign_body["path"]).with_name("gone.jpg"))

        assert api_client.post("/api/c2pa/sign", json=sign_body).status_code == 404

    def test_engine_failure_is_500_with_hint(self, api_client: TestClient, sign_body: dict[str, Any]) -> None:
        """Test engine errors are reported with a key hint."""
        app.state.provenance_engine = SigningCannedEngine(sign_error=RuntimeError("private key mismatch"))

        response = api_client.post("/api/c2pa/sign", json=sign_body)

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Signing failed: private key mismatch")

    def test_sign_no_engine_returns_503(self, api_client: TestClient, sign_body: dict[str, Any]) -> None:
        """Test signing is unavailable without an engine."""
        assert api_client.post("/api/c2pa/sign", json=sign_body).status_code == 503
