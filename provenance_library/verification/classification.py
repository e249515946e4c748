"""Classification rules for engine validation findings.

All keyword matching used to sort engine findings lives here so the rules
form one table. Matching is a case-insensitive substring test on the
human-readable status codes and explanations; it classifies what the engine
reported and does not re-derive any cryptographic result.
"""

from __future__ import annotations

from typing import Literal

from .models import ValidationStatusEntry

Severity = Literal["error", "warning"]

# Findings about the signing certificate or its trust chain
TRUST_MARKERS: tuple[str, ...] = ("cert", "trust", "certificate", "trusted")

# Status codes that make a finding an error
ERROR_MARKERS: tuple[str, ...] = ("invalid", "error", "mismatch")

# Status codes that make a finding a warning
WARNING_MARKERS: tuple[str, ...] = ("warning",)


def _contains_any(text: str | None, markers: tuple[str, ...]) -> bool:
    if not text:
        return False
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


def is_trust_finding(entry: ValidationStatusEntry) -> bool:
    """Check whether an entry's code or explanation concerns certificate trust."""
    return _contains_any(entry.code, TRUST_MARKERS) or _contains_any(entry.explanation, TRUST_MARKERS)


def is_error_code(code: str | None) -> bool:
    """Check whether a status code denotes an error."""
    return _contains_any(code, ERROR_MARKERS)


def is_warning_code(code: str | None) -> bool:
    """Check whether a status code denotes a warning."""
    return _contains_any(code, WARNING_MARKERS)


def classify_manifest_entry(entry: ValidationStatusEntry) -> Severity | None:
    """Classify a manifest-level entry.

    Returns:
        "error", "warning", or None for informational entries
    """
    if is_error_code(entry.code):
        return "error"
    if is_warning_code(entry.code):
        return "warning"
    return None


def classify_ingredient_entry(entry: ValidationStatusEntry) -> Severity:
    """Classify an ingredient-level entry. Anything not an error is a warning."""
    return "error" if is_error_code(entry.code) else "warning"
