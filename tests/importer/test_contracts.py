from datetime import datetime, timezone

from donor_app.importer.contracts import (
    DONOR_CANONICAL_FIELDS,
    has_identity,
    lookup_field,
    normalize_donor_row,
    normalize_header,
)


def test_every_updatable_field_has_a_contract_entry():
    from donor_app.models import DONOR_UPDATABLE_FIELDS

    names = {spec.name for spec in DONOR_CANONICAL_FIELDS}
    assert set(DONOR_UPDATABLE_FIELDS) <= names
    assert "tags" in names


def test_normalize_header_handles_case_spacing_and_bom():
    assert normalize_header("\ufeffFirst Name") == "first_name"
    assert normalize_header(" Organization-Name ") == "organization_name"
    assert normalize_header("Address.1") == "address_1"
    assert normalize_header(None) == ""


def test_lookup_field_skips_blank_values_in_order():
    row = {"first_name": "  ", "firstname": "Mei", "first": "Ignored"}
    assert lookup_field(row, ("first_name", "firstname", "first")) == "Mei"
    assert lookup_field({}, ("first_name",), default="x") == "x"


def test_normalize_donor_row_uses_aliases_and_coerces_kinds():
    record = normalize_donor_row(
        {
            "FirstName": " Mei ",
            "Surname": "Lee",
            "Total Donations": "$1,500",
            "LargestGift": "-10",
            "Last Gift Date": "2024-03-01",
            "Exclude": "Yes",
            "Tags": "board; alumni",
            "Address": "1 Main St",
        }
    )

    assert record["first_name"] == "Mei"
    assert record["last_name"] == "Lee"
    assert record["total_donations"] == 1500.0
    assert record["largest_gift"] == 0
    assert record["last_gift_date"] == datetime(2024, 3, 1, tzinfo=timezone.utc)
    assert record["excluded"] is True
    assert record["deceased"] is False
    assert record["tags"] == ["board", "alumni"]
    assert record["address_line1"] == "1 Main St"
    assert record["organization_name"] is None
    assert record["first_gift_date"] is None


def test_canonical_header_wins_over_alias():
    record = normalize_donor_row({"first_name": "Canonical", "firstname": "Alias"})
    assert record["first_name"] == "Canonical"


def test_has_identity():
    assert has_identity({"first_name": "Mei"})
    assert has_identity({"organization_name": "Acme"})
    assert not has_identity({"first_name": None, "last_name": "", "organization_name": None})
