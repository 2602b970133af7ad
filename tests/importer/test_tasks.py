from pathlib import Path
from unittest.mock import patch

from donor_app.importer.tasks import (
    DONOR_IMPORT_OPERATION,
    NO_DATA_ROWS_MESSAGE,
    dispatch_donor_import,
    row_progress,
    run_donor_import,
)
from donor_app.models import Donor
from donor_app.services.progress_tracker import CANCELLED_MESSAGE


def _write_csv(tmp_path: Path, body: str, name: str = "donors.csv") -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def _operation(tracker, user_id=1):
    _, operation_id = tracker.create_operation(DONOR_IMPORT_OPERATION, user_id)
    return operation_id


def test_row_progress_stays_within_the_processing_band():
    assert row_progress(0, 10) == 25
    assert row_progress(5, 10) == 60
    assert row_progress(10, 10) == 95
    assert row_progress(0, 0) == 25


class TestRunDonorImport:
    def test_completed_import_reports_counts_and_removes_the_file(self, app, tracker, tmp_path):
        path = _write_csv(tmp_path, "first_name,last_name\nMei,Lee\n,\nAl,Ng\n")
        operation_id = _operation(tracker)

        result = run_donor_import(operation_id, path, tracker=tracker)

        snapshot = tracker.get_progress(operation_id)
        assert snapshot["status"] == "completed"
        assert snapshot["progress"] == 100
        assert snapshot["message"] == "Import completed: 2 imported, 0 updated, 0 skipped"
        assert result["imported"] == 2
        assert snapshot["result"] == result
        assert Donor.query.count() == 2
        assert not path.exists()

    def test_row_errors_still_complete(self, app, tracker, tmp_path):
        path = _write_csv(tmp_path, "first_name,last_name,city\nMei,Lee,Seattle\n,,Nowhere\n")
        operation_id = _operation(tracker)

        run_donor_import(operation_id, path, tracker=tracker)

        snapshot = tracker.get_progress(operation_id)
        assert snapshot["status"] == "completed"
        assert snapshot["result"]["skipped"] == 1
        assert snapshot["result"]["errors"][0]["row"] == 3
        assert snapshot["message"].endswith("1 errors")

    def test_file_without_data_rows_completes_with_an_error_entry(self, app, tracker, tmp_path):
        path = _write_csv(tmp_path, "first_name,last_name\n")
        operation_id = _operation(tracker)

        run_donor_import(operation_id, path, tracker=tracker)

        snapshot = tracker.get_progress(operation_id)
        assert snapshot["status"] == "completed"
        assert snapshot["result"]["errors"] == [{"row": 1, "error": NO_DATA_ROWS_MESSAGE}]

    def test_unparseable_file_marks_the_operation_as_error(self, app, tracker, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_bytes(b"not a workbook")
        operation_id = _operation(tracker)

        run_donor_import(operation_id, path, tracker=tracker)

        snapshot = tracker.get_progress(operation_id)
        assert snapshot["status"] == "error"
        assert "Excel parsing error" in snapshot["message"]
        assert snapshot["result"]["errors"][0]["row"] == 1
        assert not path.exists()

    def test_cancelled_operation_keeps_rows_already_written(self, app, tracker, tmp_path):
        rows = "".join(f"Donor{i},Test\n" for i in range(4))
        path = _write_csv(tmp_path, "first_name,last_name\n" + rows)
        operation_id = _operation(tracker)
        checks = iter([False, True])

        with patch.object(tracker, "is_cancelled", side_effect=lambda _id: next(checks)):
            run_donor_import(operation_id, path, tracker=tracker)

        snapshot = tracker.get_progress(operation_id)
        assert snapshot["status"] == "cancelled"
        assert snapshot["message"] == CANCELLED_MESSAGE
        assert snapshot["result"]["cancelled"] is True
        assert Donor.query.count() == 1

    def test_unexpected_failure_is_reported(self, app, tracker, tmp_path):
        path = _write_csv(tmp_path, "first_name,last_name\nMei,Lee\n")
        operation_id = _operation(tracker)

        with patch("donor_app.importer.tasks.reconcile_donor_rows", side_effect=RuntimeError("boom")):
            run_donor_import(operation_id, path, tracker=tracker)

        snapshot = tracker.get_progress(operation_id)
        assert snapshot["status"] == "error"
        assert snapshot["message"] == "Import failed: boom"


def test_dispatch_runs_inline_when_background_is_disabled(app, tracker, tmp_path):
    path = _write_csv(tmp_path, "organization_name\nAcme Corp\n")
    operation_id = _operation(tracker)

    worker = dispatch_donor_import(app, operation_id, path)

    assert worker is None
    assert tracker.get_progress(operation_id)["status"] == "completed"


def test_dispatch_uses_a_worker_thread_when_enabled(app, tracker, tmp_path):
    path = _write_csv(tmp_path, "organization_name\nAcme Corp\n")
    operation_id = _operation(tracker)
    app.config["IMPORTER_RUN_IN_BACKGROUND"] = True

    try:
        with patch("donor_app.importer.tasks.threading.Thread") as thread_cls:
            worker = dispatch_donor_import(app, operation_id, path)
    finally:
        app.config["IMPORTER_RUN_IN_BACKGROUND"] = False

    thread_cls.assert_called_once()
    assert thread_cls.call_args.kwargs["daemon"] is True
    worker.start.assert_called_once()
    snapshot = tracker.get_progress(operation_id)
    assert snapshot["status"] == "processing"
    assert snapshot["message"] == "File uploaded successfully"
