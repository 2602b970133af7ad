"""Importer pipeline helpers."""

from __future__ import annotations

from .matching import DonorMatchIndex, lookup_key, name_key, normalize_identity, organization_key
from .reconcile import MISSING_IDENTITY_MESSAGE, ImportSummary, reconcile_donor_rows

__all__ = [
    "DonorMatchIndex",
    "ImportSummary",
    "MISSING_IDENTITY_MESSAGE",
    "lookup_key",
    "name_key",
    "normalize_identity",
    "organization_key",
    "reconcile_donor_rows",
]
