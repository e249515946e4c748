"""Verification service.

Runs the verify, read and sign flows against a provenance engine. Verify
fetches trust list options, reads the asset's manifest store and reduces it
into a report. Read failures are logged and converted into responses; sign
failures raise SigningError with a caller-facing message.
"""

from __future__ import annotations

import inspect
import logging
from pathlib import Path
from typing import Any
from typing import Protocol

from provenance_library.exceptions import AssetNotFoundError
from provenance_library.exceptions import ManifestStoreError
from provenance_library.exceptions import ProvenanceEngineError
from provenance_library.exceptions import SigningError
from provenance_library.trust.manager import TrustListCacheManager

from .aggregator import VerificationAggregator
from .models import Asset
from .models import FailureDetails
from .models import ManifestStore
from .models import ReadResponse
from .models import SignerConfig
from .models import SignRequest
from .models import SignResponse
from .models import VerifyResponse
from .signing import build_manifest_definition
from .signing import build_signer
from .signing import default_output_path
from .signing import describe_sign_error
from .trust_extractor import CertificateTrustExtractor

logger = logging.getLogger(__name__)

NO_PROVENANCE_ERROR = "This file contains no provenance data."
VERIFY_FAILED_ERROR = "An error occurred while verifying provenance data."


class ProvenanceEngine(Protocol):
    """External engine that parses, validates and signs embedded manifests.

    Both methods may be plain or coroutine functions. ``read`` returns the
    raw manifest store dictionary, or None when the asset carries no
    manifest. ``sign`` writes a signed copy of the asset to ``output_path``.
    """

    def read(self, asset: Asset, options: dict[str, Any] | None = None) -> Any: ...

    def sign(self, asset: Asset, manifest: dict[str, Any], signer: SignerConfig, output_path: str) -> Any: ...


class VerificationService:
    """Verify, read and sign flows over a provenance engine."""

    def __init__(
        self,
        engine: ProvenanceEngine,
        trust_manager: TrustListCacheManager | None = None,
        extractor: CertificateTrustExtractor | None = None,
        aggregator: VerificationAggregator | None = None,
    ) -> None:
        """Initialize verification service.

        Args:
            engine: Provenance engine used to read manifest stores
            trust_manager: Trust list cache (None reads without trust lists)
            extractor: Certificate trust extractor
            aggregator: Report aggregator
        """
        self.engine = engine
        self.trust_manager = trust_manager
        self.extractor = extractor or CertificateTrustExtractor()
        self.aggregator = aggregator or VerificationAggregator()

    async def _engine_options(self) -> dict[str, Any] | None:
        """Build engine options from cached trust lists, best-effort."""
        if self.trust_manager is None:
            return None
        try:
            contents = await self.trust_manager.get_contents()
        except Exception as e:
            logger.error(f"Could not load trust lists, reading without them: {e}", exc_info=True)
            return None
        if contents is None:
            logger.info("Trust lists unavailable, certificate trust is unknown for this read")
            return None
        return contents.to_engine_options()

    async def _read_store(self, asset: Asset) -> ManifestStore | None:
        """Read and parse the asset's manifest store.

        Raises:
            ProvenanceEngineError: If the engine fails or returns a malformed store
        """
        options = await self._engine_options()
        try:
            result = self.engine.read(asset, options)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            raise ProvenanceEngineError(f"Provenance engine failed to read {asset.path}: {e}") from e

        if result is None:
            return None
        try:
            return ManifestStore.from_engine(result)
        except ManifestStoreError as e:
            raise ProvenanceEngineError(f"Provenance engine returned a malformed manifest store: {e}") from e

    async def verify(self, asset: Asset) -> VerifyResponse:
        """Verify an asset's provenance.

        Args:
            asset: Asset to verify

        Returns:
            VerifyResponse with a full report, or failure details when the
            asset carries no readable provenance data
        """
        try:
            store = await self._read_store(asset)
        except ProvenanceEngineError as e:
            logger.error(f"Verification failed for {asset.path}: {e}", exc_info=True)
            return VerifyResponse(
                has_c2pa=False,
                is_valid=False,
                validation_details=FailureDetails(errors=[VERIFY_FAILED_ERROR]),
            )

        if store is None:
            logger.info(f"No provenance data in {asset.path}")
            return VerifyResponse(
                has_c2pa=False,
                is_valid=False,
                validation_details=FailureDetails(errors=[NO_PROVENANCE_ERROR]),
            )

        verdict = self.extractor.extract(store)
        report = self.aggregator.aggregate(store, verdict)
        logger.info(f"Verified {asset.path}: {report.status} ({len(report.errors)} errors, {len(report.warnings)} warnings)")
        return VerifyResponse(has_c2pa=True, is_valid=report.is_valid, validation_details=report)

    async def read(self, asset: Asset) -> ReadResponse:
        """Read an asset's manifest store.

        Args:
            asset: Asset to read

        Returns:
            ReadResponse with the parsed manifest store, if any
        """
        try:
            store = await self._read_store(asset)
        except ProvenanceEngineError as e:
            logger.error(f"Read failed for {asset.path}: {e}", exc_info=True)
            return ReadResponse(has_c2pa=False, error=f"Provenance read error: {e.__cause__ or e}")

        if store is None:
            return ReadResponse(has_c2pa=False)
        return ReadResponse(has_c2pa=True, manifest=store)

    async def sign(self, asset: Asset, request: SignRequest) -> SignResponse:
        """Embed a new manifest in an asset and write the signed copy.

        Args:
            asset: Asset to sign
            request: Manifest content and signer choice

        Returns:
            SignResponse with the path of the signed copy

        Raises:
            SignRequestError: If a local signer is requested without key material
            AssetNotFoundError: If the asset does not exist
            SigningError: If the engine cannot sign or writes no output
        """
        signer = build_signer(request)
        if not Path(asset.path).is_file():
            raise AssetNotFoundError(f"Asset not found: {asset.path}")

        sign = getattr(self.engine, "sign", None)
        if sign is None:
            raise SigningError("The configured provenance engine does not support signing")

        manifest = build_manifest_definition(request.manifest_data, asset.mime_type)
        output_path = Path(request.output_path) if request.output_path else default_output_path(asset)

        logger.info(f"Signing {asset.path} with the {signer.kind} signer")
        try:
            result = sign(asset, manifest, signer, str(output_path))
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Signing failed for {asset.path}: {e}", exc_info=True)
            raise SigningError(describe_sign_error(e)) from e

        if not output_path.is_file():
            raise SigningError(f"Signing failed: no signed file was written to {output_path}")

        logger.info(f"Signed {asset.path} -> {output_path}")
        return SignResponse(output_path=str(output_path), signer=signer.kind)
