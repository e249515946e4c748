"""Configuration module for provenance_library.

Provides service configuration loading from YAML and environment variables.

Public Interface:
    - ServiceSettings: Settings model
    - load_config: Load configuration
    - create_default_config: Create default config file
    - get_config_path: Get config file path
"""

from .loader import create_default_config
from .loader import get_config_path
from .loader import load_config
from .settings import ServiceSettings

__all__ = [
    "ServiceSettings",
    "load_config",
    "create_default_config",
    "get_config_path",
]
