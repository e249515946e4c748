"""Thin HTTP wrapper around provenance_library.verification.

Architecture: This router contains ONLY HTTP handling.
All business logic is in provenance_library.verification.
"""

import logging
from typing import Annotated

from fastapi import APIRouter
from fastapi import Depends
from fastapi import HTTPException

from provenance_library.exceptions import SigningError
from provenance_library.verification import Asset
from provenance_library.verification import ReadResponse
from provenance_library.verification import SignAssetRequest
from provenance_library.verification import SignResponse
from provenance_library.verification import VerificationService
from provenance_library.verification import VerifyResponse

from ..dependencies import get_verification_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/c2pa", tags=["c2pa"])


@router.post("/verify", response_model=VerifyResponse)
async def verify_asset(
    asset: Asset,
    service: Annotated[VerificationService, Depends(get_verification_service)],
) -> VerifyResponse:
    """Verify the provenance manifests embedded in an asset."""
    try:
        return await service.verify(asset)
    except Exception as exc:
        logger.error(f"Failed to verify {asset.path}: {exc}")
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.post("/read", response_model=ReadResponse)
async def read_asset(
    asset: Asset,
    service: Annotated[VerificationService, Depends(get_verification_service)],
) -> ReadResponse:
    """Read the manifest store embedded in an asset."""
    try:
        return await service.read(asset)
    except Exception as exc:
        logger.error(f"Failed to read {asset.path}: {exc}")
        raise HTTPException(status_code=500, detail="Internal server error") from exc


@router.post("/sign", response_model=SignResponse)
async def sign_asset(
    body: SignAssetRequest,
    service: Annotated[VerificationService, Depends(get_verification_service)],
) -> SignResponse:
    """Embed a new manifest in an asset and write a signed copy."""
    try:
        return await service.sign(body.asset, body)
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SigningError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"Failed to sign {body.path}: {exc}")
        raise HTTPException(status_code=500, detail="Internal server error") from exc
