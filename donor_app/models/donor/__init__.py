# donor_app/models/donor/__init__.py
"""
Donor models package.
"""

from .models import DONOR_DATE_FIELDS, DONOR_MONEY_FIELDS, DONOR_UPDATABLE_FIELDS, Donor, DonorTag

__all__ = [
    "Donor",
    "DonorTag",
    "DONOR_UPDATABLE_FIELDS",
    "DONOR_MONEY_FIELDS",
    "DONOR_DATE_FIELDS",
]
