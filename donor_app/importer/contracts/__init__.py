"""Canonical ingest contract helpers for importer adapters."""

from __future__ import annotations

from .donor import (
    DONOR_CANONICAL_FIELDS,
    IDENTITY_FIELDS,
    FieldSpec,
    get_donor_field_specs,
    has_identity,
    lookup_field,
    normalize_donor_row,
    normalize_header,
)

__all__ = [
    "FieldSpec",
    "DONOR_CANONICAL_FIELDS",
    "IDENTITY_FIELDS",
    "get_donor_field_specs",
    "has_identity",
    "lookup_field",
    "normalize_donor_row",
    "normalize_header",
]
