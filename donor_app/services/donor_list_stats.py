# donor_app/services/donor_list_stats.py
"""
Donor-list statistics maintenance.

Keeps ``EventDonorList`` counters (total, one bucket per review status) and
its ``review_status`` in step with the ``EventDonor`` rows. Incremental
helpers adjust only the affected counters; ``recompute_list_stats`` recounts
from the rows and is the corrective path when the aggregate has drifted.

None of these helpers commit; callers own the transaction.
"""

from collections import Counter

from flask import current_app
from sqlalchemy import func

from donor_app.models import DonorReviewStatus, EventDonor, EventDonorList, ListReviewStatus, db

STATUS_COUNTER_ATTRIBUTES = {
    DonorReviewStatus.PENDING: "pending",
    DonorReviewStatus.APPROVED: "approved",
    DonorReviewStatus.EXCLUDED: "excluded",
    DonorReviewStatus.AUTO_EXCLUDED: "auto_excluded",
}


def _adjust(donor_list, attribute, delta):
    value = (getattr(donor_list, attribute) or 0) + delta
    if value < 0:
        current_app.logger.warning(
            "Counter %s on donor list %s would go negative (%s); clamping to 0",
            attribute,
            donor_list.id,
            value,
        )
        value = 0
    setattr(donor_list, attribute, value)


def refresh_review_status(donor_list):
    """completed when nothing is pending, pending otherwise"""
    donor_list.review_status = ListReviewStatus.PENDING if (donor_list.pending or 0) > 0 else ListReviewStatus.COMPLETED
    return donor_list.review_status


def apply_status_delta(donor_list, status, delta):
    """Add or remove ``abs(delta)`` entries of ``status``: total and one bucket move together"""
    _adjust(donor_list, "total_donors", delta)
    _adjust(donor_list, STATUS_COUNTER_ATTRIBUTES[DonorReviewStatus(status)], delta)
    refresh_review_status(donor_list)


def apply_batch(donor_list, statuses):
    """Bulk-mode increment for a batch of newly added entries"""
    statuses = [DonorReviewStatus(status) for status in statuses]
    counts = Counter(statuses)
    _adjust(donor_list, "total_donors", len(statuses))
    for status, attribute in STATUS_COUNTER_ATTRIBUTES.items():
        if counts.get(status):
            _adjust(donor_list, attribute, counts[status])
    refresh_review_status(donor_list)


def record_status_change(donor_list, old_status, new_status):
    """Move one entry between buckets; the total is unchanged"""
    old_status = DonorReviewStatus(old_status)
    new_status = DonorReviewStatus(new_status)
    if old_status != new_status:
        _adjust(donor_list, STATUS_COUNTER_ATTRIBUTES[old_status], -1)
        _adjust(donor_list, STATUS_COUNTER_ATTRIBUTES[new_status], 1)
    refresh_review_status(donor_list)


def count_entries_by_status(donor_list_id):
    rows = (
        db.session.query(EventDonor.status, func.count(EventDonor.id))
        .filter(EventDonor.donor_list_id == donor_list_id)
        .group_by(EventDonor.status)
        .all()
    )
    counts = {status: 0 for status in STATUS_COUNTER_ATTRIBUTES}
    for status, count in rows:
        counts[DonorReviewStatus(status)] = count
    return counts


def recompute_list_stats(donor_list):
    """
    Recount a list's counters from its EventDonor rows.

    Returns:
        bool: True when any stored counter or the review status changed
    """
    db.session.flush()
    counts = count_entries_by_status(donor_list.id)
    before = (donor_list.total_donors, *(getattr(donor_list, attr) for attr in STATUS_COUNTER_ATTRIBUTES.values()))
    before_status = donor_list.review_status

    donor_list.total_donors = sum(counts.values())
    for status, attribute in STATUS_COUNTER_ATTRIBUTES.items():
        setattr(donor_list, attribute, counts[status])
    refresh_review_status(donor_list)

    after = (donor_list.total_donors, *(getattr(donor_list, attr) for attr in STATUS_COUNTER_ATTRIBUTES.values()))
    changed = before != after or before_status != donor_list.review_status
    if changed:
        current_app.logger.info("Donor list %s counters corrected from %s to %s", donor_list.id, before, after)
    return changed


def recompute_all_lists():
    """Recount every list; returns the ids of lists whose counters changed"""
    changed = []
    for donor_list in EventDonorList.query.order_by(EventDonorList.id).all():
        if recompute_list_stats(donor_list):
            changed.append(donor_list.id)
    return changed
