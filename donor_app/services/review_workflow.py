# donor_app/services/review_workflow.py
"""
Review status transitions for event donor entries.

Any status may move to any other. Reviewers may only choose Pending, Approved
or Excluded; AutoExcluded is reserved for system-driven exclusion. Every
transition keeps the owning list's counters in step.
"""

from donor_app.models import REVIEWER_STATUSES, DonorReviewStatus
from donor_app.models.base import utcnow
from donor_app.services.donor_list_stats import record_status_change
from donor_app.utils.errors import ValidationError

DEFAULT_EXCLUDE_REASON = "No reason provided"


def parse_review_status(value, *, allow_system=False):
    """
    Resolve a status string (case-insensitive) to ``DonorReviewStatus``.

    Raises:
        ValidationError: unknown status, or AutoExcluded without ``allow_system``
    """
    if isinstance(value, DonorReviewStatus):
        status = value
    else:
        token = str(value or "").strip().lower()
        status = next((s for s in DonorReviewStatus if s.value.lower() == token), None)
    allowed = tuple(DonorReviewStatus) if allow_system else REVIEWER_STATUSES
    if status is None or status not in allowed:
        choices = ", ".join(s.value for s in allowed)
        raise ValidationError(f"Invalid status. Must be one of: {choices}")
    return status


def prepare_new_entry_fields(status, exclude_reason=None):
    """Column values implied by a status on a freshly added entry"""
    status = DonorReviewStatus(status)
    if status == DonorReviewStatus.EXCLUDED and not exclude_reason:
        exclude_reason = DEFAULT_EXCLUDE_REASON
    return {
        "status": status,
        "exclude_reason": exclude_reason if status in (DonorReviewStatus.EXCLUDED, DonorReviewStatus.AUTO_EXCLUDED) else None,
        "auto_excluded": status == DonorReviewStatus.AUTO_EXCLUDED,
    }


def transition_entry(entry, new_status, *, reviewer=None, exclude_reason=None, comments=None, system=False):
    """
    Move ``entry`` to ``new_status`` and update the list counters.

    Reviewer-driven transitions stamp ``reviewer_id`` and ``review_date``.
    Does not commit.
    """
    new_status = parse_review_status(new_status, allow_system=system)
    old_status = entry.status or DonorReviewStatus.PENDING

    fields = prepare_new_entry_fields(new_status, exclude_reason or (entry.exclude_reason if new_status == old_status else None))
    entry.status = fields["status"]
    entry.exclude_reason = fields["exclude_reason"]
    entry.auto_excluded = fields["auto_excluded"]
    if comments is not None:
        entry.comments = comments

    if not system:
        entry.reviewer_id = reviewer.id if reviewer is not None else None
        entry.review_date = utcnow()

    if entry.donor_list is not None:
        record_status_change(entry.donor_list, old_status, new_status)
    return entry
