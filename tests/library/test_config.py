"""
Unit tests for configuration loading.

Tests config file creation, loading from YAML, and environment variable overrides.
"""

from pathlib import Path

import pytest

from provenance_library.config import loader
from provenance_library.config.settings import ServiceSettings


@pytest.mark.unit
class TestConfigLoader:
    """Test configuration loading functions."""

    def test_get_config_path_returns_provenanced_yaml(self, mock_storage_env: Path) -> None:
        """Test get_config_path returns provenanced.yaml in config dir."""
        config_path = loader.get_config_path()

        assert config_path.name == "provenanced.yaml"
        assert config_path.parent == mock_storage_env.resolve() / "config"

    def test_create_default_config_creates_file(self, mock_storage_env: Path) -> None:
        """Test create_default_config creates provenanced.yaml if it doesn't exist."""
        config_path = loader.get_config_path()
        assert not config_path.exists()

        loader.create_default_config()

        assert config_path.is_file()
        content = config_path.read_text()
        assert "port:" in content
        assert "trust_base_url:" in content

    def test_create_default_config_is_idempotent(self, mock_storage_env: Path) -> None:
        """Test create_default_config doesn't overwrite existing config."""
        config_path = loader.get_config_path()
        custom_content = "# Custom config\nhost: custom\n"
        config_path.write_text(custom_content)

        loader.create_default_config()

        assert config_path.read_text() == custom_content

    def test_default_config_loads_to_defaults(self, mock_storage_env: Path) -> None:
        """Test the generated default config yields the built-in defaults."""
        settings = loader.load_config()

        assert loader.get_config_path().exists()
        assert settings == ServiceSettings()

    def test_load_config_parses_yaml_settings(self, mock_storage_env: Path) -> None:
        """Test load_config parses settings from YAML file."""
        loader.get_config_path().write_text(
            'host: "0.0.0.0"\n'
            "port: 9999\n"
            "trust_enabled: false\n"
            'trust_base_url: "https://mirror.example.com/trust/"\n'
            "trust_refresh_interval_seconds: 3600\n"
        )

        settings = loader.load_config()

        assert settings.host == "0.0.0.0"
        assert settings.port == 9999
        assert settings.trust_enabled is False
        assert settings.trust_base_url == "https://mirror.example.com/trust"
        assert settings.trust_refresh_interval_seconds == 3600

    def test_load_config_env_overrides_yaml(self, mock_storage_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test environment variables override YAML settings."""
        loader.get_config_path().write_text("port: 8500\ntrust_retry_interval_seconds: 60\n")
        monkeypatch.setenv("PROVENANCED_PORT", "9999")

        settings = loader.load_config()

        assert settings.port == 9999
        assert settings.trust_retry_interval_seconds == 60

    def test_load_config_handles_invalid_yaml(self, mock_storage_env: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test load_config handles corrupted YAML gracefully."""
        loader.get_config_path().write_text("{{invalid yaml content\n")

        settings = loader.load_config()

        assert settings.port == 8430
        assert "Failed to load config" in caplog.text

    def test_load_config_ignores_non_mapping_yaml(self, mock_storage_env: Path, caplog: pytest.LogCaptureFixture) -> None:
        """Test a YAML list instead of a mapping is ignored."""
        loader.get_config_path().write_text("- one\n- two\n")

        settings = loader.load_config()

        assert settings.host == "127.0.0.1"
        assert "expected a mapping" in caplog.text

    def test_load_config_with_custom_path(self, mock_storage_env: Path) -> None:
        """Test load_config accepts custom config path."""
        custom_path = mock_storage_env / "custom-config.yaml"
        custom_path.write_text("host: custom.example.com\nadmin_token: secret\n")

        settings = loader.load_config(config_path=custom_path)

        assert settings.host == "custom.example.com"
        assert settings.admin_token == "secret"


@pytest.mark.unit
class TestServiceSettings:
    """Test ServiceSettings model."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test ServiceSettings has sensible defaults."""
        monkeypatch.delenv("PROVENANCED_PORT", raising=False)
        settings = ServiceSettings()

        assert settings.host == "127.0.0.1"
        assert settings.port == 8430
        assert settings.trust_enabled is True
        assert settings.trust_base_url == "https://contentcredentials.org/trust"
        assert settings.trust_cache_dir is None
        assert settings.trust_refresh_interval_seconds == 86400
        assert settings.admin_token is None
        assert settings.engine is None

    def test_resource_file_names(self) -> None:
        """Test the four trust resource file names."""
        settings = ServiceSettings()

        assert settings.anchor_certs_file == "anchors.pem"
        assert settings.allowed_certs_file == "allowed.pem"
        assert settings.allowed_hashes_file == "allowed.sha256.txt"
        assert settings.store_cfg_file == "store.cfg"

    def test_trust_cache_dir_is_expanded_and_resolved(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test ~ is expanded and relative paths are made absolute."""
        monkeypatch.setenv("HOME", str(tmp_path))

        settings = ServiceSettings(trust_cache_dir="~/trust")

        assert settings.trust_cache_dir == str((tmp_path / "trust").resolve())

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test settings read PROVENANCED_ environment variables."""
        monkeypatch.setenv("PROVENANCED_TRUST_ENABLED", "false")
        monkeypatch.setenv("PROVENANCED_ADMIN_TOKEN", "from-env")

        settings = ServiceSettings()

        assert settings.trust_enabled is False
        assert settings.admin_token == "from-env"
