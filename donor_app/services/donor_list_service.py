# donor_app/services/donor_list_service.py
"""
Donor List Service - membership changes on event donor lists

Every mutation updates the list counters through ``donor_list_stats`` inside
the same transaction as the row change.
"""

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from donor_app.models import Donor, DonorReviewStatus, EventDonor, EventDonorList, ListReviewStatus, db
from donor_app.services.donor_list_stats import apply_batch, apply_status_delta, recompute_list_stats
from donor_app.services.review_workflow import parse_review_status, prepare_new_entry_fields, transition_entry
from donor_app.utils.errors import NotFoundError, ValidationError
from donor_app.utils.query_params import parse_id


def get_list_or_404(list_id):
    donor_list = db.session.get(EventDonorList, list_id)
    if donor_list is None:
        raise NotFoundError("List not found")
    return donor_list


def filter_lists(args):
    query = EventDonorList.query
    status = args.get("status")
    if status:
        query = query.filter(EventDonorList.review_status == parse_list_review_status(status))
    return query.order_by(EventDonorList.id.asc())


def parse_list_review_status(value):
    token = str(value or "").strip().lower()
    for status in ListReviewStatus:
        if status.value == token:
            return status
    raise ValidationError("Invalid status")


def add_donors(donor_list, items, acting_user=None):
    """
    Add several donors to a list in one transaction with bulk counter updates.

    ``items`` are mappings with ``donor_id`` and optional ``status``,
    ``reviewer_id``, ``comments`` and ``exclude_reason``.

    Raises:
        ValidationError: empty payload, unknown donor, invalid status, or a
            donor already on the list (or repeated in the payload)
    """
    if not isinstance(items, list) or not items:
        raise ValidationError("donors must be a non-empty list")

    seen = set()
    prepared = []
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Each donor entry must be an object")
        donor_id = parse_id(item.get("donor_id"), "donor ID")
        if donor_id in seen:
            raise ValidationError(f"Donor {donor_id} appears more than once")
        seen.add(donor_id)
        status = parse_review_status(item.get("status") or DonorReviewStatus.PENDING.value, allow_system=True)
        reviewer_id = item.get("reviewer_id")
        prepared.append(
            {
                "donor_id": donor_id,
                "reviewer_id": parse_id(reviewer_id, "reviewer ID") if reviewer_id not in (None, "") else None,
                "comments": item.get("comments"),
                **prepare_new_entry_fields(status, item.get("exclude_reason")),
            }
        )

    known = {row[0] for row in db.session.query(Donor.id).filter(Donor.id.in_(seen))}
    unknown = sorted(seen - known)
    if unknown:
        raise ValidationError(f"Donor not found: {', '.join(str(i) for i in unknown)}", details={"donor_ids": unknown})

    existing = {
        row[0]
        for row in db.session.query(EventDonor.donor_id).filter(
            EventDonor.donor_list_id == donor_list.id, EventDonor.donor_id.in_(seen)
        )
    }
    if existing:
        raise ValidationError(
            f"Donor already in list: {', '.join(str(i) for i in sorted(existing))}",
            details={"donor_ids": sorted(existing)},
        )

    try:
        entries = []
        for values in prepared:
            entry = EventDonor(donor_list=donor_list, **values)
            db.session.add(entry)
            entries.append(entry)
        apply_batch(donor_list, [values["status"] for values in prepared])
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error adding donors to list {donor_list.id}: {str(e)}")
        raise

    current_app.logger.info(f"Added {len(entries)} donors to list {donor_list.id}")
    return entries


def get_entry_or_404(donor_list, donor_id):
    entry = EventDonor.query.filter_by(donor_list_id=donor_list.id, donor_id=donor_id).first()
    if entry is None:
        raise NotFoundError("Donor not found in list")
    return entry


def remove_donor(donor_list, donor_id):
    entry = get_entry_or_404(donor_list, donor_id)
    try:
        apply_status_delta(donor_list, entry.status, -1)
        db.session.delete(entry)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error removing donor {donor_id} from list {donor_list.id}: {str(e)}")
        raise
    return donor_list


def review_donor(donor_list, donor_id, data, reviewer):
    """Apply a reviewer status change to one list member"""
    if not data or not data.get("status"):
        raise ValidationError("Status is required")
    entry = get_entry_or_404(donor_list, donor_id)
    transition_entry(
        entry,
        data.get("status"),
        reviewer=reviewer,
        exclude_reason=data.get("exclude_reason"),
        comments=data.get("comments"),
    )
    db.session.commit()
    return entry


def override_review_status(donor_list, review_status):
    """Administrative override; deliberately not checked against member states"""
    donor_list.review_status = parse_list_review_status(review_status)
    db.session.commit()
    current_app.logger.info(f"List {donor_list.id} review status overridden to {donor_list.review_status.value}")
    return donor_list


def recompute(donor_list):
    changed = recompute_list_stats(donor_list)
    db.session.commit()
    return changed


def delete_list(donor_list):
    try:
        db.session.delete(donor_list)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error deleting donor list {donor_list.id}: {str(e)}")
        raise
