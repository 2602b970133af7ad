import json
import os
import time
from pathlib import Path

from donor_app.models import Donor, DonorReviewStatus, EventDonor, db
from donor_app.services.progress_tracker import STATUS_COMPLETED


def _write_csv(tmp_path: Path) -> Path:
    csv_file = tmp_path / "donors.csv"
    csv_file.write_text(
        "First Name,Last Name,Organization Name,Total Donations\n"
        "Ada,Lovelace,,100\n"
        ",,Acme Corp,250\n"
        ",,,\n"
        ",,,5\n",
        encoding="utf-8",
    )
    return csv_file


def test_importer_donors_command_imports_and_prints_summary(runner, tmp_path):
    result = runner.invoke(args=["importer", "donors", str(_write_csv(tmp_path)), "--summary-json"])

    assert result.exit_code == 0, result.output
    assert "imported: 2" in result.output
    assert "row 4: Missing required identification fields" in result.output
    payload = json.loads(result.output[result.output.index("{") :])
    assert payload["imported"] == 2
    assert payload["skipped"] == 1
    assert Donor.query.count() == 2


def test_importer_donors_command_rejects_unsupported_files(runner, tmp_path):
    path = tmp_path / "donors.txt"
    path.write_text("first_name\nAda\n", encoding="utf-8")

    result = runner.invoke(args=["importer", "donors", str(path)])

    assert result.exit_code != 0
    assert "Unsupported file format" in result.output


def test_cleanup_uploads_removes_only_old_files(app, runner):
    upload_dir = Path(app.config["IMPORTER_UPLOAD_DIR"])
    upload_dir.mkdir(parents=True, exist_ok=True)
    old_file = upload_dir / "old.csv"
    new_file = upload_dir / "new.csv"
    old_file.write_text("x", encoding="utf-8")
    new_file.write_text("y", encoding="utf-8")
    stale = time.time() - 5 * 3600
    os.utime(old_file, (stale, stale))

    result = runner.invoke(args=["importer", "cleanup-uploads", "--max-age-hours", "1"])

    assert result.exit_code == 0, result.output
    assert "Removed 1 upload file(s)" in result.output
    assert not old_file.exists()
    assert new_file.exists()


def test_lists_recompute_corrects_drifted_counters(runner, donor_list, make_donor):
    donor = make_donor(first_name="Mei", last_name="Lee")
    db.session.add(EventDonor(donor_list=donor_list, donor=donor, status=DonorReviewStatus.APPROVED))
    donor_list.total_donors = 5
    donor_list.pending = 5
    db.session.commit()

    result = runner.invoke(args=["lists", "recompute", str(donor_list.id)])

    assert result.exit_code == 0, result.output
    assert f"Corrected 1 donor list(s): {donor_list.id}" in result.output
    db.session.refresh(donor_list)
    assert (donor_list.total_donors, donor_list.approved, donor_list.pending) == (1, 1, 0)
    assert donor_list.review_status.value == "completed"

    again = runner.invoke(args=["lists", "recompute"])
    assert "All donor list counters are consistent." in again.output


def test_lists_recompute_unknown_list(runner):
    result = runner.invoke(args=["lists", "recompute", "999"])
    assert result.exit_code != 0
    assert "Donor list 999 not found." in result.output


def test_progress_sweep_removes_expired_operations(runner, tracker):
    _, operation_id = tracker.create_operation("donor_import", 1)
    tracker.update_progress(operation_id, 100, "done", STATUS_COMPLETED)
    tracker.settings.completed_ttl_seconds = -1
    tracker.update_progress(operation_id, 100, "done", STATUS_COMPLETED)

    result = runner.invoke(args=["progress", "sweep"])

    assert result.exit_code == 0, result.output
    assert "Removed 1 operation(s)." in result.output
    assert tracker.get_progress(operation_id) is None
