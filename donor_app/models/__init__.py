# donor_app/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .donor import DONOR_DATE_FIELDS, DONOR_MONEY_FIELDS, DONOR_UPDATABLE_FIELDS, Donor, DonorTag
from .event import (
    REVIEWER_STATUSES,
    DonorReviewStatus,
    Event,
    EventDonor,
    EventDonorList,
    EventStatus,
    ListReviewStatus,
)
from .user import User, UserRole

__all__ = [
    "db",
    "BaseModel",
    "User",
    "UserRole",
    # Donor models
    "Donor",
    "DonorTag",
    "DONOR_UPDATABLE_FIELDS",
    "DONOR_MONEY_FIELDS",
    "DONOR_DATE_FIELDS",
    # Event models
    "Event",
    "EventDonorList",
    "EventDonor",
    # Event enums
    "EventStatus",
    "DonorReviewStatus",
    "ListReviewStatus",
    "REVIEWER_STATUSES",
]
