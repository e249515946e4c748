"""Manifest and signer construction for the sign flow.

Turns a SignRequest into the manifest definition and signer the engine
expects, and turns engine signing errors into caller-facing messages.
"""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import Any

from provenance_library.exceptions import SignRequestError

from .models import Asset
from .models import ManifestData
from .models import SignerConfig
from .models import SignRequest

DEFAULT_CLAIM_GENERATOR = "c2pa-web-app/1.0.0"
DEFAULT_TSA_URL = "http://timestamp.digicert.com"
LOCAL_SIGNER_MISSING_KEYS = "Local signing requires a certificate and a private key."
SIGN_FAILED_MESSAGE = "Signing failed"
PEM_HINT = "The certificate or private key may not be valid PEM."
PRIVATE_KEY_HINT = "The private key may be invalid or may not match the certificate."

# Optional text fields mapped to Dublin Core assertion labels, in order
METADATA_ASSERTIONS = (
    ("creator", "dc.creator"),
    ("copyright", "dc.rights"),
    ("description", "dc.description"),
)


def build_manifest_definition(manifest_data: ManifestData, mime_type: str) -> dict[str, Any]:
    """Build the manifest definition passed to the engine.

    User assertions come first, followed by dc.* assertions for whichever
    of creator, copyright and description are set.

    Args:
        manifest_data: Caller-supplied manifest content
        mime_type: MIME type of the asset, used when no format is given

    Returns:
        Manifest definition with snake_case keys
    """
    assertions = [dict(assertion) for assertion in manifest_data.assertions]
    for field_name, label in METADATA_ASSERTIONS:
        value = getattr(manifest_data, field_name)
        if value:
            assertions.append({"label": label, "data": {"value": value}})

    return {
        "claim_generator": manifest_data.claim_generator or DEFAULT_CLAIM_GENERATOR,
        "format": manifest_data.format or mime_type,
        "title": manifest_data.title,
        "assertions": assertions,
    }


def build_signer(request: SignRequest) -> SignerConfig:
    """Choose the signer for a request.

    Raises:
        SignRequestError: If a local signer is requested without key material
    """
    if not request.use_local_signer:
        return SignerConfig(kind="test")
    if request.certificate is None or request.private_key is None:
        raise SignRequestError(LOCAL_SIGNER_MISSING_KEYS)
    return SignerConfig(
        kind="local",
        certificate=request.certificate.content.encode("utf-8"),
        private_key=request.private_key.content.encode("utf-8"),
        tsa_url=DEFAULT_TSA_URL,
    )


def default_output_path(asset: Asset) -> Path:
    """Unique ``signed_<id><suffix>`` path beside the asset."""
    source = Path(asset.path)
    return source.with_name(f"signed_{uuid.uuid4().hex}{source.suffix}")


def describe_sign_error(error: BaseException) -> str:
    """Caller-facing message for an engine signing failure, with a hint for key problems."""
    detail = str(error)
    message = f"{SIGN_FAILED_MESSAGE}: {detail}" if detail else SIGN_FAILED_MESSAGE
    if "PEM" in detail:
        return f"{message}. {PEM_HINT}"
    if "private key" in detail:
        return f"{message}. {PRIVATE_KEY_HINT}"
    return message
