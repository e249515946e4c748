"""Storage module for provenance_library.

Public Interface:
    - get_home_dir: Get PROVENANCED_HOME
    - get_config_dir: Get config directory
    - get_cache_dir: Get cache directory
    - get_trust_cache_dir: Get trust list cache directory
"""

from .paths import get_cache_dir
from .paths import get_config_dir
from .paths import get_home_dir
from .paths import get_trust_cache_dir

__all__ = [
    "get_home_dir",
    "get_config_dir",
    "get_cache_dir",
    "get_trust_cache_dir",
]
