import pytest

from donor_app.models import DonorReviewStatus, EventDonor, ListReviewStatus, db
from donor_app.services.donor_list_stats import apply_batch
from donor_app.services.review_workflow import (
    DEFAULT_EXCLUDE_REASON,
    parse_review_status,
    prepare_new_entry_fields,
    transition_entry,
)
from donor_app.utils.errors import ValidationError


class TestParseReviewStatus:
    @pytest.mark.parametrize("value", ["approved", "APPROVED", " Approved "])
    def test_case_insensitive(self, value):
        assert parse_review_status(value) == DonorReviewStatus.APPROVED

    def test_reviewers_cannot_choose_auto_excluded(self):
        with pytest.raises(ValidationError) as exc:
            parse_review_status("AutoExcluded")
        assert exc.value.message == "Invalid status. Must be one of: Pending, Approved, Excluded"

    def test_system_may_auto_exclude(self):
        assert parse_review_status("autoexcluded", allow_system=True) == DonorReviewStatus.AUTO_EXCLUDED

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            parse_review_status("maybe")


class TestPrepareNewEntryFields:
    def test_excluded_without_reason_gets_default(self):
        fields = prepare_new_entry_fields(DonorReviewStatus.EXCLUDED)
        assert fields["exclude_reason"] == DEFAULT_EXCLUDE_REASON
        assert fields["auto_excluded"] is False

    def test_reason_is_dropped_for_non_excluded_statuses(self):
        fields = prepare_new_entry_fields(DonorReviewStatus.APPROVED, "ignored")
        assert fields["exclude_reason"] is None

    def test_auto_excluded_sets_flag(self):
        fields = prepare_new_entry_fields(DonorReviewStatus.AUTO_EXCLUDED, "Deceased")
        assert fields == {"status": DonorReviewStatus.AUTO_EXCLUDED, "exclude_reason": "Deceased", "auto_excluded": True}


class TestTransitionEntry:
    @pytest.fixture
    def entry(self, donor_list, make_donor):
        donor = make_donor(first_name="Mei", last_name="Lee")
        entry = EventDonor(donor_list=donor_list, donor=donor, status=DonorReviewStatus.PENDING)
        db.session.add(entry)
        apply_batch(donor_list, [DonorReviewStatus.PENDING])
        db.session.commit()
        return entry

    def test_approve_stamps_reviewer_and_completes_list(self, entry, donor_list, test_user):
        transition_entry(entry, "Approved", reviewer=test_user, comments="Confirmed")

        assert entry.status == DonorReviewStatus.APPROVED
        assert entry.reviewer_id == test_user.id
        assert entry.review_date is not None
        assert entry.comments == "Confirmed"
        assert (donor_list.pending, donor_list.approved) == (0, 1)
        assert donor_list.review_status == ListReviewStatus.COMPLETED

    def test_exclude_records_reason(self, entry, donor_list, test_user):
        transition_entry(entry, "excluded", reviewer=test_user, exclude_reason="Moved away")

        assert entry.exclude_reason == "Moved away"
        assert donor_list.excluded == 1

    def test_back_to_pending_clears_reason(self, entry, donor_list, test_user):
        transition_entry(entry, "Excluded", reviewer=test_user)
        transition_entry(entry, "Pending", reviewer=test_user)

        assert entry.exclude_reason is None
        assert donor_list.review_status == ListReviewStatus.PENDING
        assert donor_list.is_consistent()

    def test_system_transition_does_not_stamp_reviewer(self, entry, donor_list):
        transition_entry(entry, "AutoExcluded", exclude_reason="Deceased", system=True)

        assert entry.auto_excluded is True
        assert entry.reviewer_id is None
        assert donor_list.auto_excluded == 1
