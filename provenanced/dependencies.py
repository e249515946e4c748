"""Shared dependency factories for FastAPI endpoints.

Long-lived services are built once in the application lifespan and kept in
``app.state``; these factories hand them to routers.
"""

from fastapi import HTTPException
from fastapi import Request

from provenance_library.config.settings import ServiceSettings
from provenance_library.trust import TrustListCacheManager
from provenance_library.verification import VerificationService


def get_settings(request: Request) -> ServiceSettings:
    """Get loaded service settings.

    Args:
        request: FastAPI request object

    Returns:
        ServiceSettings from app state, or defaults if not loaded
    """
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else ServiceSettings()


def get_trust_manager(request: Request) -> TrustListCacheManager:
    """Get trust list cache manager.

    Args:
        request: FastAPI request object

    Returns:
        TrustListCacheManager from app state

    Raises:
        HTTPException: 503 if the manager was not initialized
    """
    manager = getattr(request.app.state, "trust_manager", None)
    if manager is None:
        raise HTTPException(status_code=503, detail="Trust list cache not initialized")
    return manager


def get_verification_service(request: Request) -> VerificationService:
    """Get verification service for the configured provenance engine.

    Args:
        request: FastAPI request object

    Returns:
        VerificationService bound to the engine and trust cache in app state

    Raises:
        HTTPException: 503 if no provenance engine is configured
    """
    engine = getattr(request.app.state, "provenance_engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="No provenance engine configured")
    return VerificationService(engine=engine, trust_manager=getattr(request.app.state, "trust_manager", None))
