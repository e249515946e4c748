"""Thin HTTP wrapper around provenance_library.trust.

Architecture: This router contains ONLY HTTP handling.
All business logic is in provenance_library.trust.
"""

import hmac
import logging
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Header
from fastapi import HTTPException

from provenance_library.config.settings import ServiceSettings
from provenance_library.models import CamelCaseModel
from provenance_library.trust import TrustListCacheManager
from provenance_library.trust import TrustListStatus

from ..dependencies import get_settings
from ..dependencies import get_trust_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trust", tags=["trust"])


class TrustUpdateResponse(CamelCaseModel):
    """Result of a manual trust list refresh."""

    success: bool
    message: str
    status: TrustListStatus


@router.get("/status", response_model=TrustListStatus)
async def get_trust_status(
    manager: Annotated[TrustListCacheManager, Depends(get_trust_manager)],
) -> TrustListStatus:
    """Get trust list cache status (no network I/O)."""
    try:
        return manager.get_status()
    except Exception as exc:
        logger.error(f"Failed to get trust list status: {exc}")
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.post("/update", response_model=TrustUpdateResponse)
async def update_trust_lists(
    manager: Annotated[TrustListCacheManager, Depends(get_trust_manager)],
    settings: Annotated[ServiceSettings, Depends(get_settings)],
    x_admin_token: Annotated[str | None, Header()] = None,
) -> TrustUpdateResponse:
    """Force a trust list refresh.

    Requires the X-Admin-Token header to match the configured admin token.
    """
    if not settings.admin_token or not x_admin_token or not hmac.compare_digest(x_admin_token, settings.admin_token):
        logger.warning("Rejected trust list update with missing or invalid admin token")
        raise HTTPException(status_code=403, detail="Invalid admin token")

    if not manager.enabled:
        raise HTTPException(status_code=400, detail="Trust list verification is disabled")

    try:
        success = await manager.refresh()
        message = "Trust lists updated" if success else "Trust list update incomplete, previous copies kept"
        return TrustUpdateResponse(success=success, message=message, status=manager.get_status())
    except HTTPException:
        raise
    except Exception as exc:
        logger.error(f"Failed to update trust lists: {exc}")
        raise HTTPException(status_code=500, detail="Internal server error") from exc
