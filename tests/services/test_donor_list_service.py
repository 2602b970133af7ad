import pytest

from donor_app.models import DonorReviewStatus, EventDonor, EventDonorList, ListReviewStatus, db
from donor_app.services import donor_list_service
from donor_app.utils.errors import NotFoundError, ValidationError


@pytest.fixture
def two_donors(make_donor):
    return make_donor(first_name="Ada", last_name="Byron"), make_donor(organization_name="Acme")


class TestAddDonors:
    def test_bulk_add_updates_counters(self, donor_list, two_donors, test_user):
        ada, acme = two_donors
        entries = donor_list_service.add_donors(
            donor_list,
            [
                {"donor_id": ada.id, "reviewer_id": test_user.id, "comments": "Board pick"},
                {"donor_id": acme.id, "status": "Excluded"},
            ],
            test_user,
        )

        assert len(entries) == 2
        assert entries[1].exclude_reason == "No reason provided"
        assert (donor_list.total_donors, donor_list.pending, donor_list.excluded) == (2, 1, 1)
        assert donor_list.review_status == ListReviewStatus.PENDING

    def test_system_status_allowed_on_add(self, donor_list, two_donors):
        donor_list_service.add_donors(donor_list, [{"donor_id": two_donors[0].id, "status": "AutoExcluded"}])
        assert donor_list.auto_excluded == 1
        assert donor_list.review_status == ListReviewStatus.COMPLETED

    @pytest.mark.parametrize("items", [[], None, "1"])
    def test_empty_payload(self, donor_list, items):
        with pytest.raises(ValidationError) as exc:
            donor_list_service.add_donors(donor_list, items)
        assert exc.value.message == "donors must be a non-empty list"

    def test_duplicate_in_payload(self, donor_list, two_donors):
        ada = two_donors[0]
        with pytest.raises(ValidationError) as exc:
            donor_list_service.add_donors(donor_list, [{"donor_id": ada.id}, {"donor_id": ada.id}])
        assert exc.value.message == f"Donor {ada.id} appears more than once"

    def test_unknown_donor_rejects_whole_batch(self, donor_list, two_donors):
        with pytest.raises(ValidationError) as exc:
            donor_list_service.add_donors(donor_list, [{"donor_id": two_donors[0].id}, {"donor_id": 404}])
        assert exc.value.message == "Donor not found: 404"
        assert EventDonor.query.count() == 0
        assert donor_list.total_donors == 0

    def test_already_in_list(self, donor_list, two_donors):
        ada = two_donors[0]
        donor_list_service.add_donors(donor_list, [{"donor_id": ada.id}])
        with pytest.raises(ValidationError) as exc:
            donor_list_service.add_donors(donor_list, [{"donor_id": ada.id}])
        assert exc.value.message == f"Donor already in list: {ada.id}"
        assert donor_list.total_donors == 1


class TestMembership:
    def test_review_requires_status(self, donor_list, two_donors, test_user):
        donor_list_service.add_donors(donor_list, [{"donor_id": two_donors[0].id}])
        with pytest.raises(ValidationError) as exc:
            donor_list_service.review_donor(donor_list, two_donors[0].id, {}, test_user)
        assert exc.value.message == "Status is required"

    def test_review_unknown_member(self, donor_list, test_user):
        with pytest.raises(NotFoundError) as exc:
            donor_list_service.review_donor(donor_list, 77, {"status": "Approved"}, test_user)
        assert exc.value.message == "Donor not found in list"

    def test_remove_donor_decrements(self, donor_list, two_donors):
        ada, acme = two_donors
        donor_list_service.add_donors(donor_list, [{"donor_id": ada.id}, {"donor_id": acme.id, "status": "Approved"}])

        donor_list_service.remove_donor(donor_list, ada.id)

        assert (donor_list.total_donors, donor_list.pending, donor_list.approved) == (1, 0, 1)
        assert donor_list.review_status == ListReviewStatus.COMPLETED

    def test_override_review_status_is_not_validated_against_members(self, donor_list, two_donors):
        donor_list_service.add_donors(donor_list, [{"donor_id": two_donors[0].id}])
        donor_list_service.override_review_status(donor_list, "completed")
        assert donor_list.review_status == ListReviewStatus.COMPLETED
        with pytest.raises(ValidationError):
            donor_list_service.override_review_status(donor_list, "done")

    def test_recompute_and_delete(self, donor_list, two_donors):
        donor_list_service.add_donors(donor_list, [{"donor_id": two_donors[0].id}])
        donor_list.pending = 0
        db.session.commit()

        assert donor_list_service.recompute(donor_list) is True
        assert donor_list.pending == 1

        list_id = donor_list.id
        donor_list_service.delete_list(donor_list)
        assert db.session.get(EventDonorList, list_id) is None
        assert EventDonor.query.count() == 0
        with pytest.raises(NotFoundError):
            donor_list_service.get_list_or_404(list_id)


def test_filter_lists_by_status(donor_list, two_donors):
    assert donor_list_service.filter_lists({"status": "completed"}).count() == 1
    assert donor_list_service.filter_lists({"status": "pending"}).count() == 0
    with pytest.raises(ValidationError):
        donor_list_service.filter_lists({"status": "weird"})


def test_entry_status_enum_round_trips(donor_list, two_donors):
    donor_list_service.add_donors(donor_list, [{"donor_id": two_donors[1].id, "status": "approved"}])
    assert EventDonor.query.one().status == DonorReviewStatus.APPROVED
