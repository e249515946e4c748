"""Storage locations for provenanced.

All state lives under PROVENANCED_HOME:

    $PROVENANCED_HOME/
        config/provenanced.yaml
        cache/trust/        (trust list resources + metadata.json)

The config and cache directories can each be moved with their own
environment variable. Every getter creates its directory on first use.
"""

import os
from pathlib import Path

HOME_ENV = "PROVENANCED_HOME"
CONFIG_DIR_ENV = "PROVENANCED_CONFIG_DIR"
CACHE_DIR_ENV = "PROVENANCED_CACHE_DIR"


def get_home_dir() -> Path:
    """Get PROVENANCED_HOME from environment.

    Returns:
        Absolute path to the home directory (default: ./.provenanced)
    """
    return Path(os.environ.get(HOME_ENV, ".provenanced")).resolve()


def _ensure_dir(name: str, override_env: str | None = None) -> Path:
    """Resolve a directory under home, honoring an override variable."""
    override = os.environ.get(override_env) if override_env else None
    directory = Path(override).resolve() if override is not None else get_home_dir() / name
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_config_dir() -> Path:
    """Get configuration directory ($PROVENANCED_CONFIG_DIR or $PROVENANCED_HOME/config)."""
    return _ensure_dir("config", CONFIG_DIR_ENV)


def get_cache_dir() -> Path:
    """Get cache directory ($PROVENANCED_CACHE_DIR or $PROVENANCED_HOME/cache)."""
    return _ensure_dir("cache", CACHE_DIR_ENV)


def get_trust_cache_dir() -> Path:
    """Get trust list cache directory.

    Returns:
        Path to <cache dir>/trust
    """
    trust_dir = get_cache_dir() / "trust"
    trust_dir.mkdir(parents=True, exist_ok=True)
    return trust_dir
