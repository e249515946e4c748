"""provenanced daemon.

FastAPI service exposing trust list cache status and provenance
verification over REST.
"""

__version__ = "0.1.0"
