"""Daemon-level services."""

from .trust_refresh_scheduler import TrustRefreshScheduler

__all__ = ["TrustRefreshScheduler"]
