"""Verification models.

Typed views of the provenance engine's manifest store output, and the
consolidated report produced from it. Engine output uses snake_case keys;
all models accept those names and serialize to camelCase.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from typing import Literal

from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from provenance_library.exceptions import ManifestStoreError
from provenance_library.models.base import CamelCaseModel

ReportStatus = Literal["valid", "invalid", "warning"]


def _none_as_empty_list(value: Any) -> Any:
    return [] if value is None else value


# =============================================================================
# Engine Output Models (read-only input)
# =============================================================================


class ValidationStatusEntry(CamelCaseModel):
    """One check outcome reported by the engine for a manifest or ingredient."""

    code: str | None = Field(None, description="Status code (e.g. 'assertion.hashedURI.mismatch')")
    explanation: str | None = Field(None, description="Human-readable explanation")
    url: str | None = Field(None, description="URI of the item the status refers to")


class SignatureInfo(CamelCaseModel):
    """Signature metadata of a manifest."""

    issuer: str | None = Field(None, description="Signing certificate issuer")
    time: str | None = Field(None, description="Signing time (ISO 8601)")
    alg: str | None = Field(None, description="Signature algorithm")
    cert_serial_number: str | None = Field(None, description="Signing certificate serial number")


class Ingredient(CamelCaseModel):
    """An input asset referenced by a manifest."""

    title: str | None = None
    format: str | None = None
    relationship: str | None = None
    validation_status: list[ValidationStatusEntry] = Field(default_factory=list)

    @field_validator("validation_status", mode="before")
    @classmethod
    def coerce_null_lists(cls, v: Any) -> Any:
        """Treat null lists from the engine as empty."""
        return _none_as_empty_list(v)


class Manifest(CamelCaseModel):
    """One provenance manifest inside a manifest store."""

    label: str | None = None
    title: str | None = None
    format: str | None = None
    claim_generator: str | None = None
    signature_info: SignatureInfo | None = None
    assertions: list[dict[str, Any]] = Field(default_factory=list)
    ingredients: list[Ingredient] = Field(default_factory=list)
    validation_status: list[ValidationStatusEntry] = Field(default_factory=list)

    @field_validator("assertions", "ingredients", "validation_status", mode="before")
    @classmethod
    def coerce_null_lists(cls, v: Any) -> Any:
        """Treat null lists from the engine as empty."""
        return _none_as_empty_list(v)


class ManifestStore(CamelCaseModel):
    """All manifests embedded in an asset plus the overall validation status."""

    active_manifest_label: str | None = None
    manifests: dict[str, Manifest] = Field(default_factory=dict)
    validation_status: str = "unknown"
    validation_entries: list[ValidationStatusEntry] = Field(default_factory=list)

    @property
    def active_manifest(self) -> Manifest | None:
        """The manifest named by ``active_manifest_label``, if present."""
        if self.active_manifest_label is None:
            return None
        return self.manifests.get(self.active_manifest_label)

    @classmethod
    def from_engine(cls, data: Any) -> ManifestStore:
        """Build a manifest store from raw engine output.

        Args:
            data: Engine result mapping (snake_case keys)

        Returns:
            Typed manifest store

        Raises:
            ManifestStoreError: If data is not a mapping or manifests are malformed
        """
        if not isinstance(data, Mapping):
            raise ManifestStoreError(f"Manifest store must be a mapping, got {type(data).__name__}")

        raw_manifests = data.get("manifests") or {}
        if not isinstance(raw_manifests, Mapping):
            raise ManifestStoreError("Manifest store 'manifests' must be a mapping")

        try:
            manifests = {
                str(label): Manifest.model_validate({**raw, "label": raw.get("label") or label})
                for label, raw in raw_manifests.items()
            }
        except (AttributeError, TypeError, ValidationError) as e:
            raise ManifestStoreError(f"Malformed manifest in store: {e}") from e

        active = data.get("active_manifest")
        if isinstance(active, Mapping):
            active_label = active.get("label")
        else:
            active_label = active or None

        raw_status = data.get("validation_status")
        entries: list[ValidationStatusEntry] = []
        if isinstance(raw_status, list):
            try:
                entries = [ValidationStatusEntry.model_validate(entry) for entry in raw_status]
            except ValidationError as e:
                raise ManifestStoreError(f"Malformed validation status entry: {e}") from e

        state = data.get("validation_state")
        if isinstance(state, str) and state:
            status = state.lower()
            if status == "trusted":
                status = "valid"
        elif isinstance(raw_status, str) and raw_status:
            status = raw_status
        elif entries and entries[0].code:
            status = entries[0].code
        else:
            status = "unknown"

        return cls(
            active_manifest_label=active_label,
            manifests=manifests,
            validation_status=status,
            validation_entries=entries,
        )


# =============================================================================
# Report Models (output)
# =============================================================================


class TrustVerdict(CamelCaseModel):
    """Trust judgment for the active manifest's signer."""

    is_trusted: bool = Field(..., description="Whether no certificate or trust problems were reported")
    issuer: str | None = Field(None, description="Signing certificate issuer")
    timestamp: str | None = Field(None, description="Signing time")
    error_message: str | None = Field(None, description="Semicolon-joined trust problems")


class ManifestInfo(CamelCaseModel):
    """Per-manifest detail in a validation report."""

    label: str
    title: str
    is_active: bool
    signature_info: SignatureInfo | None = None
    signature_time: str | None = None
    signature_issuer: str | None = None
    validation_details: list[ValidationStatusEntry] = Field(default_factory=list)
    ingredient_issues: list[str] | None = None


class ManifestStoreSummary(CamelCaseModel):
    """Overall manifest store information."""

    validation_status: str
    active_manifest_label: str | None = None
    manifests_count: int = 0


class ActiveManifestSnapshot(CamelCaseModel):
    """Summary of the active manifest."""

    label: str | None = None
    title: str | None = None
    format: str | None = None
    generator: str | None = None
    signature_info: SignatureInfo | None = None
    assertions_count: int = 0
    ingredients_count: int = 0


class ValidationReport(CamelCaseModel):
    """Consolidated, caller-facing verification verdict."""

    is_valid: bool
    status: ReportStatus
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    manifest_validations: list[ManifestInfo] = Field(default_factory=list)
    manifest_store: ManifestStoreSummary
    active_manifest: ActiveManifestSnapshot | None = None
    certificate_trust: TrustVerdict


# =============================================================================
# Service Models (request/response)
# =============================================================================


class Asset(CamelCaseModel):
    """Content reference handed to the provenance engine."""

    path: str = Field(..., description="Path of the asset on disk")
    mime_type: str = Field(..., description="Declared MIME type (e.g. 'image/jpeg')")


class FailureDetails(CamelCaseModel):
    """Validation details returned when no report could be produced."""

    status: ReportStatus = "invalid"
    errors: list[str] = Field(default_factory=list)


class VerifyResponse(CamelCaseModel):
    """Result of verifying an asset."""

    success: bool = True
    has_c2pa: bool = Field(..., alias="hasC2pa", description="Whether the asset carries provenance data")
    is_valid: bool
    validation_details: ValidationReport | FailureDetails


class ReadResponse(CamelCaseModel):
    """Result of reading an asset's manifest store."""

    success: bool = True
    has_c2pa: bool = Field(..., alias="hasC2pa", description="Whether the asset carries provenance data")
    manifest: ManifestStore | None = None
    error: str | None = None


# =============================================================================
# Signing Models
# =============================================================================


class ManifestData(CamelCaseModel):
    """Caller-supplied content of the manifest to embed."""

    title: str = Field(..., description="Manifest title")
    creator: str | None = Field(None, description="Added as a dc.creator assertion")
    copyright: str | None = Field(None, description="Added as a dc.rights assertion")
    description: str | None = Field(None, description="Added as a dc.description assertion")
    claim_generator: str | None = Field(None, description="Claim generator (default: c2pa-web-app/1.0.0)")
    format: str | None = Field(None, description="Asset format (default: the asset's MIME type)")
    assertions: list[dict[str, Any]] = Field(default_factory=list, description="Assertions appended as given")

    @field_validator("assertions", mode="before")
    @classmethod
    def coerce_null_lists(cls, v: Any) -> Any:
        """Treat a null assertion list as empty."""
        return _none_as_empty_list(v)


class PemFile(CamelCaseModel):
    """Uploaded PEM material."""

    name: str = ""
    content: str


class SignerConfig(CamelCaseModel):
    """Signer handed to the engine.

    ``local`` signs with the caller's certificate and private key; ``test``
    asks the engine for its built-in test signer.
    """

    kind: Literal["local", "test"]
    certificate: bytes | None = None
    private_key: bytes | None = None
    algorithm: str = "es256"
    tsa_url: str | None = None


class SignRequest(CamelCaseModel):
    """What to embed and how to sign it."""

    manifest_data: ManifestData
    certificate: PemFile | None = None
    private_key: PemFile | None = None
    use_local_signer: bool = False
    output_path: str | None = Field(None, description="Where to write the signed copy (default: beside the asset)")


class SignAssetRequest(SignRequest):
    """Request body of the sign endpoint: the asset plus the signing request."""

    path: str = Field(..., description="Path of the asset on disk")
    mime_type: str = Field(..., description="Declared MIME type (e.g. 'image/jpeg')")

    @property
    def asset(self) -> Asset:
        return Asset(path=self.path, mime_type=self.mime_type)


class SignResponse(CamelCaseModel):
    """Result of signing an asset."""

    success: bool = True
    output_path: str
    signer: Literal["local", "test"]
