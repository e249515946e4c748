"""Configuration loading for provenanced.

This module handles loading service configuration from YAML files
and environment variables.

Contract:
- Inputs: Config file paths, environment variables
- Outputs: ServiceSettings objects
- Side Effects: Creates default config file if missing
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from ..storage.paths import get_config_dir
from .settings import ServiceSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = """# provenanced configuration

# Server settings
host: "127.0.0.1"
port: 8430
log_level: "info"
workers: 1

# Trust list cache
trust_enabled: true
trust_base_url: "https://contentcredentials.org/trust"
trust_refresh_interval_seconds: 86400
trust_retry_interval_seconds: 300
trust_download_timeout_seconds: 30

# Cache directory for trust resources
# Default: $PROVENANCED_HOME/cache/trust
# trust_cache_dir: "~/.cache/provenanced/trust"

# Token required by POST /api/trust/update (endpoint refuses all requests when unset)
# admin_token: "change-me"

# Provenance engine factory ("module:attribute"), called with no arguments
# Verify and read endpoints return 503 when unset
# engine: "mypackage.engine:create_engine"
"""


def get_config_path() -> Path:
    """Get path to config file.

    Returns:
        Path to provenanced.yaml in config directory
    """
    return get_config_dir() / "provenanced.yaml"


def create_default_config() -> None:
    """Create default config file if it doesn't exist."""
    config_path = get_config_path()

    if config_path.exists():
        logger.debug(f"Config file already exists: {config_path}")
        return

    config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
    logger.info(f"Created default config: {config_path}")


def _read_yaml(config_path: Path) -> dict[str, Any]:
    """Read a YAML mapping, returning {} for missing, unreadable or non-mapping files."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.info("Using default settings and environment variables")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {config_path}: expected a mapping, got {type(data).__name__}")
        return {}
    logger.debug(f"Loaded config from {config_path}")
    return data


def load_config(config_path: Path | None = None) -> ServiceSettings:
    """Load service configuration from YAML and environment.

    Precedence is defaults < YAML < environment. Variables are prefixed
    with PROVENANCED_ (e.g., PROVENANCED_PORT).

    Args:
        config_path: Optional config file path (default: provenanced.yaml in
            the config dir, created with defaults if missing)

    Returns:
        Validated service settings
    """
    if config_path is None:
        config_path = get_config_path()
        create_default_config()

    # A YAML key is dropped when its environment variable is set so pydantic-settings reads the env value
    prefix = ServiceSettings.model_config["env_prefix"]
    yaml_settings = {
        key: value
        for key, value in _read_yaml(config_path).items()
        if f"{prefix}{str(key).upper()}" not in os.environ
    }

    settings = ServiceSettings(**yaml_settings)
    logger.info(
        f"Configuration loaded: host={settings.host}, port={settings.port}, "
        f"trust_enabled={settings.trust_enabled}, trust_base_url={settings.trust_base_url}"
    )
    return settings
