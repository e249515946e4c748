"""Shared models for provenance library."""

from .base import CamelCaseModel

__all__ = [
    "CamelCaseModel",
]
