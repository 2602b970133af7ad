# donor_app/models/event/__init__.py
"""
Event models package.
"""

from .enums import REVIEWER_STATUSES, DonorReviewStatus, EventStatus, ListReviewStatus
from .models import Event, EventDonor, EventDonorList

__all__ = [
    # Models
    "Event",
    "EventDonorList",
    "EventDonor",
    # Enums
    "EventStatus",
    "DonorReviewStatus",
    "ListReviewStatus",
    "REVIEWER_STATUSES",
]
