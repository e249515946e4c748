"""Verification result aggregation.

Reduces a manifest store and a trust verdict into one consolidated
ValidationReport. Aggregation is pure: it performs no I/O and produces the
same report for the same inputs and reference time.
"""

from __future__ import annotations

import logging
from datetime import UTC
from datetime import datetime

from provenance_library.exceptions import ManifestStoreError

from .classification import classify_ingredient_entry
from .classification import classify_manifest_entry
from .models import ActiveManifestSnapshot
from .models import Ingredient
from .models import Manifest
from .models import ManifestInfo
from .models import ManifestStore
from .models import ManifestStoreSummary
from .models import ReportStatus
from .models import TrustVerdict
from .models import ValidationReport

logger = logging.getLogger(__name__)

TAMPER_ERROR = "Provenance signature is invalid. The manifest or its signature may have been tampered with."
MANIFEST_WARNING = "Provenance signature has warnings. The signature is valid but some checks reported problems."
MISSING_TIMESTAMP_WARNING = "Signature has no timestamp, reduced trust."
STALE_SIGNATURE_WARNING = "Signature is over one year old, certificate may have expired."
TRUST_UNAVAILABLE_MESSAGE = "certificate trust information unavailable"

UNTITLED = "untitled"
UNKNOWN_ISSUER = "unknown issuer"
NO_DETAIL = "no detail"
UNKNOWN_INGREDIENT = "unknown"
GENERIC_INGREDIENT_ERROR = "validation error"


def parse_signature_time(value: str | None) -> datetime | None:
    """Parse an ISO 8601 signing time.

    Naive times are taken as UTC. Unparseable values are treated as absent.

    Args:
        value: Signing time string

    Returns:
        Timezone-aware datetime, or None
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug(f"Unparseable signature time: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def one_year_before(now: datetime) -> datetime:
    """Same calendar date one year earlier (Feb 29 maps to Feb 28)."""
    try:
        return now.replace(year=now.year - 1)
    except ValueError:
        return now.replace(year=now.year - 1, day=28)


def overall_status(validation_status: str) -> ReportStatus:
    """Map the engine's overall validation status to a report status."""
    if validation_status == "valid":
        return "valid"
    if validation_status == "invalid":
        return "invalid"
    return "warning"


class VerificationAggregator:
    """Builds consolidated validation reports from manifest stores."""

    def aggregate(
        self,
        store: ManifestStore,
        trust_verdict: TrustVerdict | None,
        now: datetime | None = None,
    ) -> ValidationReport:
        """Reduce a manifest store into a validation report.

        Args:
            store: Manifest store returned by the provenance engine
            trust_verdict: Verdict from CertificateTrustExtractor
            now: Reference time for the signature age check (default: current UTC
                time; naive values are taken as UTC)

        Returns:
            Consolidated validation report

        Raises:
            ManifestStoreError: If store is missing or not a ManifestStore
        """
        if store is None:
            raise ManifestStoreError("No manifest store to aggregate")
        if not isinstance(store, ManifestStore):
            raise ManifestStoreError(f"Expected ManifestStore, got {type(store).__name__}")

        if trust_verdict is None:
            trust_verdict = TrustVerdict(is_trusted=False, error_message=TRUST_UNAVAILABLE_MESSAGE)
        now = now or datetime.now(UTC)
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)

        status = overall_status(store.validation_status)
        errors: list[str] = []
        warnings: list[str] = []

        if not trust_verdict.is_trusted and trust_verdict.error_message:
            warnings.append(f"certificate trust: {trust_verdict.error_message}")

        manifest_validations = [
            self._manifest_info(label, manifest, store, errors, warnings) for label, manifest in store.manifests.items()
        ]

        active = store.active_manifest
        if active is not None:
            self._check_signature_age(active, now, warnings)

        return ValidationReport(
            is_valid=status == "valid",
            status=status,
            errors=errors,
            warnings=warnings,
            manifest_validations=manifest_validations,
            manifest_store=ManifestStoreSummary(
                validation_status=store.validation_status,
                active_manifest_label=store.active_manifest_label,
                manifests_count=len(store.manifests),
            ),
            active_manifest=self._active_snapshot(active),
            certificate_trust=trust_verdict,
        )

    def _manifest_info(
        self,
        label: str,
        manifest: Manifest,
        store: ManifestStore,
        errors: list[str],
        warnings: list[str],
    ) -> ManifestInfo:
        """Build per-manifest detail, appending its findings to errors/warnings."""
        info = ManifestInfo(
            label=label,
            title=manifest.title or UNTITLED,
            is_active=label == store.active_manifest_label,
            signature_info=manifest.signature_info,
        )
        if manifest.signature_info is not None:
            info.signature_time = manifest.signature_info.time
            info.signature_issuer = manifest.signature_info.issuer or UNKNOWN_ISSUER

        if store.validation_status == "invalid":
            errors.append(TAMPER_ERROR)
        elif store.validation_status != "valid":
            warnings.append(MANIFEST_WARNING)

        for entry in manifest.validation_status:
            info.validation_details.append(entry.model_copy())
            severity = classify_manifest_entry(entry)
            if severity == "error":
                errors.append(entry.explanation or NO_DETAIL)
            elif severity == "warning":
                warnings.append(entry.explanation or NO_DETAIL)

        issues = self._ingredient_issues(manifest.ingredients, errors, warnings)
        if issues:
            info.ingredient_issues = issues
        return info

    def _ingredient_issues(
        self,
        ingredients: list[Ingredient],
        errors: list[str],
        warnings: list[str],
    ) -> list[str]:
        """Describe each ingredient finding and sort it into errors or warnings."""
        issues = []
        for index, ingredient in enumerate(ingredients, start=1):
            for entry in ingredient.validation_status:
                detail = entry.explanation or entry.code or GENERIC_INGREDIENT_ERROR
                issue = f"ingredient {index} ({ingredient.title or UNKNOWN_INGREDIENT}): {detail}"
                issues.append(issue)
                if classify_ingredient_entry(entry) == "error":
                    errors.append(issue)
                else:
                    warnings.append(issue)
        return issues

    def _check_signature_age(self, active: Manifest, now: datetime, warnings: list[str]) -> None:
        """Add advisory warnings about the active manifest's signing time."""
        signature_time = parse_signature_time(active.signature_info.time if active.signature_info else None)
        if signature_time is None:
            warnings.append(MISSING_TIMESTAMP_WARNING)
        elif signature_time < one_year_before(now):
            warnings.append(STALE_SIGNATURE_WARNING)

    def _active_snapshot(self, active: Manifest | None) -> ActiveManifestSnapshot | None:
        if active is None:
            return None
        return ActiveManifestSnapshot(
            label=active.label,
            title=active.title,
            format=active.format,
            generator=active.claim_generator,
            signature_info=active.signature_info,
            assertions_count=len(active.assertions),
            ingredients_count=len(active.ingredients),
        )
