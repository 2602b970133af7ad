"""
Donor matching index used by the bulk import reconciler.

Maps normalized identity keys (``first|last`` or ``org|organization``) to
donor ids. Built once per import run from the existing donors and updated in
place as the run creates donors, so later rows in the same file match donors
created by earlier rows.
"""

from __future__ import annotations

import unicodedata
from typing import Dict, Optional

from flask import current_app, has_app_context

from donor_app.models import Donor, db

ORG_KEY_PREFIX = "org|"


def normalize_identity(value: object | None) -> str:
    if value is None:
        return ""
    return unicodedata.normalize("NFC", str(value)).strip().casefold()


def name_key(first_name: object | None, last_name: object | None) -> Optional[str]:
    first = normalize_identity(first_name)
    last = normalize_identity(last_name)
    if first and last:
        return f"{first}|{last}"
    return None


def organization_key(organization_name: object | None) -> Optional[str]:
    organization = normalize_identity(organization_name)
    if organization:
        return f"{ORG_KEY_PREFIX}{organization}"
    return None


def lookup_key(
    first_name: object | None,
    last_name: object | None,
    organization_name: object | None,
) -> Optional[str]:
    """Name key when both names are present, otherwise the organization key."""

    return name_key(first_name, last_name) or organization_key(organization_name)


class DonorMatchIndex:
    """In-memory identity key -> donor id map with last-write-wins collisions."""

    def __init__(self) -> None:
        self._ids: Dict[str, int] = {}
        self.collisions = 0

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, key: object) -> bool:
        return key in self._ids

    @classmethod
    def build(cls) -> "DonorMatchIndex":
        """Build from every donor currently stored, loading only identity columns."""

        rows = db.session.query(
            Donor.id,
            Donor.first_name,
            Donor.last_name,
            Donor.organization_name,
        ).order_by(Donor.id)
        index = cls()
        for donor_id, first_name, last_name, organization_name in rows:
            index.add_existing(donor_id, first_name, last_name, organization_name)
        return index

    def add_existing(
        self,
        donor_id: int,
        first_name: object | None,
        last_name: object | None,
        organization_name: object | None,
    ) -> None:
        """Register a stored donor under its name key and its organization key."""

        for key in (name_key(first_name, last_name), organization_key(organization_name)):
            if key is not None:
                self._set(key, donor_id)

    def lookup(
        self,
        first_name: object | None,
        last_name: object | None,
        organization_name: object | None,
    ) -> Optional[int]:
        key = lookup_key(first_name, last_name, organization_name)
        if key is None:
            return None
        return self._ids.get(key)

    def register(
        self,
        donor_id: int,
        first_name: object | None,
        last_name: object | None,
        organization_name: object | None,
    ) -> Optional[str]:
        """Insert a newly created donor under the key used to look it up."""

        key = lookup_key(first_name, last_name, organization_name)
        if key is not None:
            self._set(key, donor_id)
        return key

    def _set(self, key: str, donor_id: int) -> None:
        previous = self._ids.get(key)
        if previous is not None and previous != donor_id:
            self.collisions += 1
            if has_app_context():
                current_app.logger.warning(
                    "Donor match key %r maps to donors %s and %s; keeping %s",
                    key,
                    previous,
                    donor_id,
                    donor_id,
                )
        self._ids[key] = donor_id
