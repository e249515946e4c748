"""Settings models for provenanced.

This module defines the configuration structure for the daemon and the
trust list cache it manages.

Contract:
- Inputs: Environment variables, YAML files
- Outputs: Validated settings objects
- Side Effects: None (read-only)
"""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict


class ServiceSettings(BaseSettings):
    """Configuration for provenanced.

    Attributes:
        host: Listen address (default: 127.0.0.1)
        port: Listen port (default: 8430)
        log_level: Logging level (default: info)
        workers: Number of workers (default: 1)
        cors_origins: Allowed CORS origins
        trust_enabled: Whether trust list caching is active
        trust_base_url: Remote base URL the trust resources are fetched from
        trust_cache_dir: Directory holding cached trust resources and metadata
            (default: $PROVENANCED_HOME/cache/trust)
        trust_refresh_interval_seconds: Time-to-live of a full refresh
        trust_retry_interval_seconds: Minimum wait before retrying a failed refresh
        trust_download_timeout_seconds: Per-resource download timeout
        admin_token: Token required for manual trust list refresh
        engine: Import path ("module:attribute") of the provenance engine factory

    Example:
        >>> settings = ServiceSettings()
        >>> assert settings.port == 8430
        >>> assert settings.trust_refresh_interval_seconds == 86400
    """

    model_config = SettingsConfigDict(
        env_prefix="PROVENANCED_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "127.0.0.1"
    port: int = 8430
    log_level: str = "info"
    workers: int = 1
    cors_origins: list[str] = ["http://localhost:5173"]

    trust_enabled: bool = True
    trust_base_url: str = "https://contentcredentials.org/trust"
    trust_cache_dir: str | None = None
    trust_refresh_interval_seconds: int = 86400
    trust_retry_interval_seconds: int = 300
    trust_download_timeout_seconds: float = 30.0

    anchor_certs_file: str = "anchors.pem"
    allowed_certs_file: str = "allowed.pem"
    allowed_hashes_file: str = "allowed.sha256.txt"
    store_cfg_file: str = "store.cfg"

    admin_token: str | None = None
    engine: str | None = None

    @field_validator("trust_cache_dir")
    @classmethod
    def expand_and_resolve_path(cls, v: str | None) -> str | None:
        """Expand ~ and resolve to absolute path.

        Args:
            v: Path string (may contain ~ or be relative), or None for the default

        Returns:
            Absolute path as string, or None
        """
        if v is None:
            return None
        return str(Path(v).expanduser().resolve())

    @field_validator("trust_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so resource URLs join with a single slash."""
        return v.rstrip("/")
