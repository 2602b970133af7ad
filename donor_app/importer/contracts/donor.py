"""Canonical donor ingest contract definitions.

Single source of truth for the spreadsheet headers accepted by the donor
importer: each canonical field lists the header aliases tried, in order, and
the kind of value it holds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Mapping, Tuple

from donor_app.importer.parsing import normalize_text, parse_boolean, parse_date, parse_number, parse_tag_list

FieldKind = Literal["text", "money", "date", "boolean", "tags"]

IDENTITY_FIELDS: Tuple[str, ...] = ("first_name", "last_name", "organization_name")


@dataclass(frozen=True)
class FieldSpec:
    """Metadata describing a canonical donor ingest field."""

    name: str
    aliases: Tuple[str, ...]
    kind: FieldKind = "text"
    description: str = ""

    def headers(self) -> Tuple[str, ...]:
        """Return the lookup order: canonical header first, then aliases."""

        return (self.name, *self.aliases)


DONOR_CANONICAL_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("pmm", ("prospect_move_manager",), description="Prospect move manager."),
    FieldSpec("smm", ("stewardship_move_manager",), description="Stewardship move manager."),
    FieldSpec("vmm", ("volunteer_move_manager",), description="Volunteer move manager."),
    FieldSpec("excluded", ("exclude",), kind="boolean", description="Excluded from event invitations."),
    FieldSpec("deceased", ("is_deceased",), kind="boolean", description="Donor is deceased."),
    FieldSpec("first_name", ("firstname", "first"), description="Given name."),
    FieldSpec("nick_name", ("nickname",), description="Preferred or nick name."),
    FieldSpec("last_name", ("lastname", "last", "surname"), description="Family name."),
    FieldSpec(
        "organization_name",
        ("organizationname", "organization", "org_name"),
        description="Organization name for institutional donors.",
    ),
    FieldSpec("total_donations", ("totaldonations",), kind="money", description="Lifetime donations."),
    FieldSpec("total_pledges", ("totalpledges",), kind="money", description="Outstanding pledges."),
    FieldSpec("largest_gift", ("largestgift",), kind="money", description="Largest single gift."),
    FieldSpec("largest_gift_appeal", ("largestgiftappeal",), description="Appeal of the largest gift."),
    FieldSpec("first_gift_date", ("firstgiftdate",), kind="date", description="Date of first gift."),
    FieldSpec("last_gift_date", ("lastgiftdate",), kind="date", description="Date of most recent gift."),
    FieldSpec("last_gift_amount", ("lastgiftamount",), kind="money", description="Most recent gift amount."),
    FieldSpec("last_gift_request", ("lastgiftrequest",), description="Most recent solicitation."),
    FieldSpec("last_gift_appeal", ("lastgiftappeal",), description="Appeal of the most recent gift."),
    FieldSpec("address_line1", ("address1", "address"), description="Street address."),
    FieldSpec("address_line2", ("address2",), description="Additional address line."),
    FieldSpec("city", (), description="City or locality."),
    FieldSpec("contact_phone_type", ("contactphonetype",), description="Preferred phone type."),
    FieldSpec("phone_restrictions", ("phonerestrictions",), description="Phone contact restrictions."),
    FieldSpec("email_restrictions", ("emailrestrictions",), description="E-mail contact restrictions."),
    FieldSpec(
        "communication_restrictions",
        ("communicationrestrictions",),
        description="General communication restrictions.",
    ),
    FieldSpec(
        "subscription_events_in_person",
        ("subscriptioneventsinperson",),
        description="Subscribed to in-person event invitations.",
    ),
    FieldSpec(
        "subscription_events_magazine",
        ("subscriptioneventsmagazine",),
        description="Subscribed to the events magazine.",
    ),
    FieldSpec(
        "communication_preference",
        ("communicationpreference",),
        description="Preferred communication channel.",
    ),
    FieldSpec("tags", ("tag",), kind="tags", description="Comma-separated tag names."),
)


def get_donor_field_specs() -> Tuple[FieldSpec, ...]:
    """Return the canonical donor field specifications."""

    return DONOR_CANONICAL_FIELDS


def normalize_header(header: object) -> str:
    """Normalize a header for lookup (case/space/hyphen agnostic, BOM stripped)."""

    token = str(header or "").strip().lstrip("\ufeff").lower()
    for char in (" ", "-", "."):
        token = token.replace(char, "_")
    return token


def _is_blank(value: object | None) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def lookup_field(row: Mapping[str, object], headers: Tuple[str, ...], default: object | None = None) -> object | None:
    """Return the first non-blank value among ``headers`` (in order), else ``default``."""

    for header in headers:
        value = row.get(header)
        if not _is_blank(value):
            return value
    return default


def normalize_donor_row(raw_row: Mapping[str, object]) -> dict[str, object | None]:
    """
    Convert one raw spreadsheet row into a canonical donor record.

    Never raises for malformed cells: bad money values fall back to 0, bad
    dates to ``None``, unrecognised booleans to ``False``.
    """

    row = {normalize_header(key): value for key, value in raw_row.items() if key is not None}
    record: dict[str, object | None] = {}
    for spec in get_donor_field_specs():
        value = lookup_field(row, spec.headers())
        if spec.kind == "money":
            record[spec.name] = parse_number(value, 0, minimum=0)
        elif spec.kind == "date":
            record[spec.name] = parse_date(value)
        elif spec.kind == "boolean":
            record[spec.name] = parse_boolean(value)
        elif spec.kind == "tags":
            record[spec.name] = parse_tag_list(value)
        else:
            record[spec.name] = normalize_text(value)
    return record


def has_identity(record: Mapping[str, object | None]) -> bool:
    """True when at least one identity field is present."""

    return any(record.get(field) for field in IDENTITY_FIELDS)
