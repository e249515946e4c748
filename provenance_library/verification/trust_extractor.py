"""Certificate trust extraction.

Derives a trust verdict for the active manifest's signer from the
certificate and trust findings the provenance engine reported.
"""

from __future__ import annotations

import logging

from .classification import is_trust_finding
from .models import ManifestStore
from .models import TrustVerdict
from .models import ValidationStatusEntry

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "no data"
UNKNOWN_ERROR_MESSAGE = "unknown error"


def flatten_validation_entries(store: ManifestStore) -> list[ValidationStatusEntry]:
    """Collect validation entries from the store and all of its manifests.

    Store-level entries come first, then the active manifest's, then the
    remaining manifests'. Duplicate entries are kept once.

    Args:
        store: Manifest store

    Returns:
        Flattened, de-duplicated entries
    """
    active = store.active_manifest
    groups = [store.validation_entries]
    if active is not None:
        groups.append(active.validation_status)
    groups.extend(
        manifest.validation_status
        for label, manifest in store.manifests.items()
        if label != store.active_manifest_label
    )

    seen: set[tuple[str | None, str | None, str | None]] = set()
    entries = []
    for group in groups:
        for entry in group:
            key = (entry.code, entry.explanation, entry.url)
            if key not in seen:
                seen.add(key)
                entries.append(entry)
    return entries


class CertificateTrustExtractor:
    """Produces a trust verdict from engine-reported findings."""

    def extract(self, store: ManifestStore | None) -> TrustVerdict:
        """Judge whether the active manifest's signer is trusted.

        Args:
            store: Manifest store, or None when the asset carried no provenance data

        Returns:
            Trust verdict with issuer and signing time of the active manifest
        """
        if store is None:
            return TrustVerdict(is_trusted=False, error_message=NO_DATA_MESSAGE)

        issuer = None
        timestamp = None
        active = store.active_manifest
        if active is not None and active.signature_info is not None:
            issuer = active.signature_info.issuer
            timestamp = active.signature_info.time

        findings = [entry for entry in flatten_validation_entries(store) if is_trust_finding(entry)]
        if not findings:
            return TrustVerdict(is_trusted=True, issuer=issuer, timestamp=timestamp)

        message = "; ".join(entry.explanation or entry.code or UNKNOWN_ERROR_MESSAGE for entry in findings)
        logger.debug(f"Certificate trust findings for {store.active_manifest_label}: {message}")
        return TrustVerdict(
            is_trusted=False,
            issuer=issuer,
            timestamp=timestamp,
            error_message=message,
        )
