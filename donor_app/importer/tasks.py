"""
Donor import orchestration.

``run_donor_import`` parses an uploaded file, reconciles its rows and reports
progress through the app's progress tracker. ``dispatch_donor_import`` runs it
inline or on a background thread holding its own app context, depending on
``IMPORTER_RUN_IN_BACKGROUND``.
"""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Any

from flask import Flask, current_app

from donor_app.importer.adapters import SpreadsheetAdapterError, load_donor_rows
from donor_app.importer.metrics import record_import_finished, record_import_started
from donor_app.importer.pipeline import ImportSummary, reconcile_donor_rows
from donor_app.importer.utils import cleanup_upload
from donor_app.services.progress_tracker import (
    CANCELLED_MESSAGE,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_ERROR,
    STATUS_PROCESSING,
    ProgressTracker,
    get_progress_tracker,
)

DONOR_IMPORT_OPERATION = "donor_import"
NO_DATA_ROWS_MESSAGE = "No data rows found in the file"

PROGRESS_UPLOADED = 5
PROGRESS_PARSING = 10
PROGRESS_PARSED = 20
PROGRESS_ROWS_START = 25
PROGRESS_ROWS_SPAN = 70
PROGRESS_ROWS_CEILING = 95


def row_progress(index: int, total: int) -> float:
    """Percentage reported before processing row ``index`` of ``total``."""

    if total <= 0:
        return PROGRESS_ROWS_START
    return min(PROGRESS_ROWS_CEILING, PROGRESS_ROWS_START + index * PROGRESS_ROWS_SPAN / total)


def run_donor_import(
    operation_id: str,
    file_path: Path | str,
    *,
    tracker: ProgressTracker | None = None,
    keep_file: bool = False,
) -> dict[str, Any]:
    """
    Execute one donor import for a tracked operation. Requires an app context.

    Returns:
        The result payload stored on the operation.
    """

    tracker = tracker or get_progress_tracker()
    interval = int(current_app.config.get("IMPORTER_PROGRESS_INTERVAL", 10) or 10)
    started = time.monotonic()
    final_status = STATUS_ERROR
    summary = ImportSummary()
    record_import_started()

    try:
        tracker.update_progress(operation_id, PROGRESS_PARSING, "Parsing file...", STATUS_PROCESSING)
        try:
            rows = load_donor_rows(file_path)
        except SpreadsheetAdapterError as exc:
            current_app.logger.warning("Donor import %s could not parse %s: %s", operation_id, file_path, exc)
            result = {**summary.as_dict(), "errors": [{"row": 1, "error": str(exc)}]}
            tracker.update_progress(operation_id, PROGRESS_PARSING, str(exc), STATUS_ERROR, result=result)
            return result

        preamble_errors = [] if rows else [{"row": 1, "error": NO_DATA_ROWS_MESSAGE}]
        total = len(rows)
        tracker.update_progress(operation_id, PROGRESS_PARSED, f"Found {total} records to process", STATUS_PROCESSING)

        def report(index: int, count: int) -> None:
            tracker.update_progress(
                operation_id,
                row_progress(index, count),
                f"Processing record {index + 1} of {count}",
                STATUS_PROCESSING,
            )

        summary = reconcile_donor_rows(
            rows,
            should_cancel=lambda: tracker.is_cancelled(operation_id),
            on_progress=report,
            progress_interval=interval,
        )
        summary.errors[:0] = preamble_errors
        result = summary.as_dict()

        if summary.cancelled:
            final_status = STATUS_CANCELLED
            progress = round(summary.rows_seen * 100 / total) if total else 0
            tracker.update_progress(operation_id, progress, CANCELLED_MESSAGE, STATUS_CANCELLED, result=result)
        else:
            final_status = STATUS_COMPLETED
            tracker.update_progress(operation_id, 100, summary.completion_message(), STATUS_COMPLETED, result=result)
        current_app.logger.info(
            "Donor import %s finished (%s): %s",
            operation_id,
            final_status,
            summary.completion_message(),
        )
        return result
    except Exception as exc:
        current_app.logger.error("Donor import %s failed: %s", operation_id, exc, exc_info=True)
        result = summary.as_dict()
        tracker.update_progress(operation_id, 0, f"Import failed: {exc}", STATUS_ERROR, result=result)
        return result
    finally:
        if not keep_file:
            cleanup_upload(Path(file_path))
        record_import_finished(
            status=final_status,
            duration_seconds=time.monotonic() - started,
            counts={
                "imported": summary.imported,
                "updated": summary.updated,
                "skipped": summary.skipped,
                "error": len(summary.errors),
            },
        )


def _run_with_app_context(app: Flask, operation_id: str, file_path: Path, tracker: ProgressTracker) -> None:
    with app.app_context():
        run_donor_import(operation_id, file_path, tracker=tracker)


def dispatch_donor_import(app: Flask, operation_id: str, file_path: Path) -> threading.Thread | None:
    """
    Start the import for an already-created operation.

    Returns:
        The worker thread when running in the background, else ``None`` after
        the import has finished inline.
    """

    tracker = get_progress_tracker(app)
    tracker.update_progress(operation_id, PROGRESS_UPLOADED, "File uploaded successfully", STATUS_PROCESSING)

    if not app.config.get("IMPORTER_RUN_IN_BACKGROUND", True):
        run_donor_import(operation_id, file_path, tracker=tracker)
        return None

    worker = threading.Thread(
        target=_run_with_app_context,
        args=(app, operation_id, file_path, tracker),
        name=f"donor-import-{operation_id}",
        daemon=True,
    )
    worker.start()
    return worker
