from donor_app.importer.pipeline import DonorMatchIndex
from donor_app.importer.pipeline.matching import lookup_key, name_key, normalize_identity, organization_key
from donor_app.models import Donor, db


def test_keys_are_case_and_space_insensitive():
    assert name_key(" MEI ", "lee") == "mei|lee"
    assert organization_key("Acme Corp ") == "org|acme corp"
    assert normalize_identity("José") == normalize_identity("JOSÉ")


def test_lookup_key_prefers_full_name_then_organization():
    assert lookup_key("Mei", "Lee", "Acme") == "mei|lee"
    assert lookup_key("Mei", None, "Acme") == "org|acme"
    assert lookup_key(None, "Lee", None) is None


def test_build_indexes_existing_donors_by_name_and_organization(app):
    person = Donor(first_name="Mei", last_name="Lee", organization_name="Lee Family Trust")
    company = Donor(organization_name="Acme Corp")
    db.session.add_all([person, company])
    db.session.commit()

    index = DonorMatchIndex.build()

    assert index.lookup("mei", "LEE", None) == person.id
    assert index.lookup(None, None, "lee family trust") == person.id
    assert index.lookup(None, None, "ACME CORP") == company.id
    assert index.lookup("Unknown", "Person", None) is None
    assert len(index) == 3


def test_collisions_keep_the_last_donor_and_are_counted(app, mock_logger):
    index = DonorMatchIndex()
    index.add_existing(1, "Mei", "Lee", None)
    index.add_existing(2, "mei", "lee", None)

    assert index.lookup("Mei", "Lee", None) == 2
    assert index.collisions == 1
    mock_logger.warning.assert_called_once()


def test_register_uses_organization_key():
    index = DonorMatchIndex()
    key = index.register(7, None, None, "Acme Corp")

    assert key == "org|acme corp"
    assert index.lookup(None, None, "acme corp") == 7


def test_register_without_identity_is_a_no_op():
    index = DonorMatchIndex()
    assert index.register(3, None, "Lee", None) is None
    assert len(index) == 0
