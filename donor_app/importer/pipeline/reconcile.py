"""
Bulk donor import reconciler.

Rows are processed strictly in input order and committed one at a time: a
failing row is rolled back, recorded with its spreadsheet row number (header
is row 1) and the run moves on. The batch as a whole is never atomic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from donor_app.importer.contracts import has_identity, normalize_donor_row
from donor_app.models import DONOR_UPDATABLE_FIELDS, Donor, db

from .matching import DonorMatchIndex

MISSING_IDENTITY_MESSAGE = "Missing required identification fields"
HEADER_ROW_OFFSET = 2

ProgressCallback = Callable[[int, int], None]
CancelCheck = Callable[[], bool]


@dataclass
class ImportSummary:
    """Counts and per-row errors accumulated by one reconciliation run."""

    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    cancelled: bool = False
    rows_seen: int = 0

    def add_error(self, row: int, message: str) -> None:
        self.errors.append({"row": row, "error": message})

    def completion_message(self) -> str:
        message = f"Import completed: {self.imported} imported, {self.updated} updated, {self.skipped} skipped"
        if self.errors:
            message += f", {len(self.errors)} errors"
        return message

    def as_dict(self) -> Dict[str, Any]:
        return {
            "imported": self.imported,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "cancelled": self.cancelled,
        }


def _donor_values(record: Mapping[str, object | None], *, for_update: bool) -> Dict[str, object | None]:
    values = {name: record.get(name) for name in DONOR_UPDATABLE_FIELDS}
    if for_update:
        # Blank cells leave stored values alone
        values = {name: value for name, value in values.items() if value is not None}
    return values


def _create_donor(record: Mapping[str, object | None]) -> Donor:
    donor = Donor(**_donor_values(record, for_update=False))
    donor.set_tags(record.get("tags") or [])
    db.session.add(donor)
    db.session.commit()
    return donor


def _update_donor(donor: Donor, record: Mapping[str, object | None]) -> Donor:
    for name, value in _donor_values(record, for_update=True).items():
        setattr(donor, name, value)
    tags = record.get("tags")
    if tags:
        donor.set_tags(tags)
    db.session.commit()
    return donor


def reconcile_donor_rows(
    rows: Sequence[Mapping[str, object | None]] | Iterable[Mapping[str, object | None]],
    *,
    index: Optional[DonorMatchIndex] = None,
    should_cancel: Optional[CancelCheck] = None,
    on_progress: Optional[ProgressCallback] = None,
    progress_interval: int = 10,
) -> ImportSummary:
    """
    Create or update one donor per row.

    Args:
        rows: raw row mappings with lower-cased headers.
        index: matching index to use; built from the database when omitted.
        should_cancel: checked before every row; a true result stops the run
            and marks the summary cancelled. Rows already written stay written.
        on_progress: called with ``(row_index, total_rows)`` before every
            ``progress_interval``-th row.

    Returns:
        ImportSummary with imported/updated/skipped counts and row errors.
    """

    rows = list(rows)
    total = len(rows)
    match_index = index if index is not None else DonorMatchIndex.build()
    summary = ImportSummary()
    interval = max(1, int(progress_interval or 1))

    for position, raw_row in enumerate(rows):
        if should_cancel is not None and should_cancel():
            summary.cancelled = True
            current_app.logger.info("Donor import cancelled before row %s of %s", position + 1, total)
            break

        if on_progress is not None and position % interval == 0:
            on_progress(position, total)

        row_number = position + HEADER_ROW_OFFSET
        summary.rows_seen += 1
        try:
            record = normalize_donor_row(raw_row)
            if not has_identity(record):
                summary.skipped += 1
                summary.add_error(row_number, MISSING_IDENTITY_MESSAGE)
                continue

            first_name = record.get("first_name")
            last_name = record.get("last_name")
            organization_name = record.get("organization_name")

            existing_id = match_index.lookup(first_name, last_name, organization_name)
            existing = db.session.get(Donor, existing_id) if existing_id is not None else None

            if existing is not None:
                _update_donor(existing, record)
                summary.updated += 1
                continue

            if existing_id is not None:
                current_app.logger.info(
                    "Matched donor %s no longer exists; creating a new donor for row %s",
                    existing_id,
                    row_number,
                )
            donor = _create_donor(record)
            match_index.register(donor.id, first_name, last_name, organization_name)
            summary.imported += 1
        except (SQLAlchemyError, ValueError, TypeError) as exc:
            db.session.rollback()
            current_app.logger.warning("Error processing donor at row %s: %s", row_number, exc)
            summary.add_error(row_number, f"Error processing donor: {exc}")

    return summary
