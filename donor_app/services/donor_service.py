# donor_app/services/donor_service.py
"""
Donor Service - donor queries, edits and cascading deletes

Deleting donors removes their EventDonor rows and decrements the counters of
every affected donor list inside the same transaction.
"""

from collections import defaultdict
from typing import Dict, Iterable, List

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from donor_app.importer.parsing import normalize_text, parse_boolean, parse_date, parse_number
from donor_app.models import (
    DONOR_DATE_FIELDS,
    DONOR_MONEY_FIELDS,
    DONOR_UPDATABLE_FIELDS,
    Donor,
    DonorTag,
    EventDonor,
    db,
)
from donor_app.models.donor.models import DONOR_BOOLEAN_FIELDS
from donor_app.services.donor_list_stats import apply_status_delta
from donor_app.utils.errors import NotFoundError, ValidationError
from donor_app.utils.query_params import camel_to_snake, parse_bool_arg, resolve_sort

DONOR_SORT_FIELDS = (
    "first_name",
    "last_name",
    "organization_name",
    "total_donations",
    "largest_gift",
    "last_gift_date",
    "city",
    "pmm",
    "created_at",
)


def filter_donors(args):
    """Build the donor listing query from request args"""
    query = Donor.query

    for field in ("pmm", "city"):
        value = args.get(field)
        if value:
            query = query.filter(getattr(Donor, field) == value)

    for field in DONOR_BOOLEAN_FIELDS:
        flag = parse_bool_arg(args.get(field))
        if flag is not None:
            query = query.filter(getattr(Donor, field).is_(flag))

    min_donation = args.get("minDonation") or args.get("min_donation")
    if min_donation:
        try:
            query = query.filter(Donor.total_donations >= float(min_donation))
        except ValueError:
            raise ValidationError("minDonation must be a number")

    tags = [tag.strip() for tag in (args.get("tags") or "").split(",") if tag.strip()]
    if tags:
        query = query.filter(Donor.tags.any(DonorTag.tag_name.in_(tags)))

    search = (args.get("search") or "").strip()
    if search:
        term = f"%{search}%"
        query = query.filter(
            or_(
                Donor.first_name.ilike(term),
                Donor.last_name.ilike(term),
                Donor.organization_name.ilike(term),
            )
        )

    order_by = resolve_sort(Donor, args.get("sort"), args.get("order"), DONOR_SORT_FIELDS, "last_name")
    return query.order_by(order_by, Donor.id.asc())


def coerce_donor_fields(data):
    """
    Keep whitelisted donor fields (snake_case or camelCase keys) and coerce
    money, date and boolean values.
    """
    values = {}
    for raw_key, value in (data or {}).items():
        key = camel_to_snake(raw_key)
        if key not in DONOR_UPDATABLE_FIELDS:
            continue
        if key in DONOR_MONEY_FIELDS:
            number = parse_number(value, None)
            if number is None or number < 0:
                raise ValidationError(f"{key} must be a non-negative number")
            values[key] = number
        elif key in DONOR_DATE_FIELDS:
            if value in (None, ""):
                values[key] = None
            else:
                parsed = parse_date(value)
                if parsed is None:
                    raise ValidationError(f"{key} is not a valid date")
                values[key] = parsed
        elif key in DONOR_BOOLEAN_FIELDS:
            values[key] = parse_boolean(value)
        else:
            values[key] = normalize_text(value)
    return values


def _extract_tags(data):
    if not data or "tags" not in data:
        return None
    tags = data.get("tags")
    if isinstance(tags, str):
        tags = tags.split(",")
    if not isinstance(tags, (list, tuple)):
        raise ValidationError("tags must be a list of names")
    return [str(tag) for tag in tags]


def create_donor(data):
    values = coerce_donor_fields(data)
    donor = Donor(**values)
    if not donor.has_identity():
        raise ValidationError("First name, last name, or organization name is required")
    tags = _extract_tags(data)
    if tags:
        donor.set_tags(tags)
    db.session.add(donor)
    db.session.commit()
    current_app.logger.info(f"Created donor {donor.id}")
    return donor


def update_donor(donor, data):
    values = coerce_donor_fields(data)
    for key, value in values.items():
        setattr(donor, key, value)
    if not donor.has_identity():
        db.session.rollback()
        raise ValidationError("First name, last name, or organization name is required")
    tags = _extract_tags(data)
    if tags is not None:
        donor.set_tags(tags)
    db.session.commit()
    current_app.logger.info(f"Updated donor {donor.id}: {sorted(values)}")
    return donor


def get_donor_or_404(donor_id):
    donor = db.session.get(Donor, donor_id)
    if donor is None:
        raise NotFoundError("Donor not found")
    return donor


def delete_donors(donor_ids: Iterable[int]) -> List[int]:
    """
    Delete donors with their EventDonor rows in one transaction, decrementing
    the counters of each affected list.

    Returns:
        list: ids of the donors that existed and were deleted
    """
    ids = sorted(set(donor_ids))
    try:
        donors = Donor.query.filter(Donor.id.in_(ids)).all() if ids else []
        found = [donor.id for donor in donors]
        entries = EventDonor.query.filter(EventDonor.donor_id.in_(found)).all() if found else []

        touched: Dict[int, int] = defaultdict(int)
        for entry in entries:
            if entry.donor_list is not None:
                apply_status_delta(entry.donor_list, entry.status, -1)
                touched[entry.donor_list_id] += 1
            db.session.delete(entry)
        db.session.flush()

        for donor in donors:
            db.session.delete(donor)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting donors {ids}: {str(e)}")
        raise

    if touched:
        current_app.logger.info(f"Deleted donors {found}; list counters adjusted: {dict(touched)}")
    return found
