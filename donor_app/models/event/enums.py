# donor_app/models/event/enums.py
"""
Enums for event and donor-list models.
"""

from enum import Enum as PyEnum


class EventStatus(PyEnum):
    """Event lifecycle status enumeration"""

    PLANNING = "Planning"
    LIST_GENERATION = "ListGeneration"
    REVIEW = "Review"
    READY = "Ready"
    COMPLETE = "Complete"


class DonorReviewStatus(PyEnum):
    """Review status of one donor on an event donor list"""

    PENDING = "Pending"
    APPROVED = "Approved"
    EXCLUDED = "Excluded"
    AUTO_EXCLUDED = "AutoExcluded"


class ListReviewStatus(PyEnum):
    """Review status of a whole event donor list"""

    PENDING = "pending"
    COMPLETED = "completed"


# Statuses a reviewer may assign; AUTO_EXCLUDED is reserved for system rules
REVIEWER_STATUSES = (DonorReviewStatus.PENDING, DonorReviewStatus.APPROVED, DonorReviewStatus.EXCLUDED)
