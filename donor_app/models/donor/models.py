# donor_app/models/donor/models.py

from sqlalchemy import Index
from sqlalchemy.orm import validates

from ..base import BaseModel, db

DONOR_MONEY_FIELDS = ("total_donations", "total_pledges", "largest_gift", "last_gift_amount")
DONOR_DATE_FIELDS = ("first_gift_date", "last_gift_date")
DONOR_BOOLEAN_FIELDS = ("excluded", "deceased")

# Columns that edits and import updates are allowed to touch
DONOR_UPDATABLE_FIELDS = (
    "pmm",
    "smm",
    "vmm",
    "excluded",
    "deceased",
    "first_name",
    "nick_name",
    "last_name",
    "organization_name",
    "total_donations",
    "total_pledges",
    "largest_gift",
    "largest_gift_appeal",
    "first_gift_date",
    "last_gift_date",
    "last_gift_amount",
    "last_gift_request",
    "last_gift_appeal",
    "address_line1",
    "address_line2",
    "city",
    "contact_phone_type",
    "phone_restrictions",
    "email_restrictions",
    "communication_restrictions",
    "subscription_events_in_person",
    "subscription_events_magazine",
    "communication_preference",
)


class Donor(BaseModel):
    """A person or organization that may contribute funds"""

    __tablename__ = "donors"

    id = db.Column(db.Integer, primary_key=True)

    # Identity (at least one of these is required)
    first_name = db.Column(db.String(100), nullable=True, index=True)
    nick_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True, index=True)
    organization_name = db.Column(db.String(200), nullable=True, index=True)

    # Relationship managers
    pmm = db.Column(db.String(200), nullable=True, index=True)
    smm = db.Column(db.String(200), nullable=True)
    vmm = db.Column(db.String(200), nullable=True)

    # Flags
    excluded = db.Column(db.Boolean, default=False, nullable=False)
    deceased = db.Column(db.Boolean, default=False, nullable=False)

    # Giving history
    total_donations = db.Column(db.Float, default=0, nullable=False)
    total_pledges = db.Column(db.Float, default=0, nullable=False)
    largest_gift = db.Column(db.Float, default=0, nullable=False)
    largest_gift_appeal = db.Column(db.String(200), nullable=True)
    first_gift_date = db.Column(db.DateTime(timezone=True), nullable=True)
    last_gift_date = db.Column(db.DateTime(timezone=True), nullable=True)
    last_gift_amount = db.Column(db.Float, default=0, nullable=False)
    last_gift_request = db.Column(db.String(200), nullable=True)
    last_gift_appeal = db.Column(db.String(200), nullable=True)

    # Address
    address_line1 = db.Column(db.String(255), nullable=True)
    address_line2 = db.Column(db.String(255), nullable=True)
    city = db.Column(db.String(100), nullable=True, index=True)

    # Communication preferences
    contact_phone_type = db.Column(db.String(50), nullable=True)
    phone_restrictions = db.Column(db.String(255), nullable=True)
    email_restrictions = db.Column(db.String(255), nullable=True)
    communication_restrictions = db.Column(db.String(255), nullable=True)
    subscription_events_in_person = db.Column(db.String(50), nullable=True)
    subscription_events_magazine = db.Column(db.String(50), nullable=True)
    communication_preference = db.Column(db.String(100), nullable=True)

    # Relationships
    tags = db.relationship("DonorTag", back_populates="donor", cascade="all, delete-orphan")
    event_entries = db.relationship("EventDonor", back_populates="donor", passive_deletes=True)

    __table_args__ = (
        Index("idx_donor_name", "last_name", "first_name"),
        Index("idx_donor_total_donations", "total_donations"),
    )

    def __repr__(self):
        return f"<Donor {self.get_display_name()}>"

    @validates(*DONOR_MONEY_FIELDS)
    def validate_money(self, key, value):
        """Monetary fields are non-negative"""
        if value is not None and value < 0:
            raise ValueError(f"{key} cannot be negative")
        return value

    def has_identity(self):
        return bool(self.first_name or self.last_name or self.organization_name)

    def get_full_name(self):
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts)

    def get_display_name(self):
        return self.get_full_name() or self.organization_name or "Unknown"

    def get_tag_names(self):
        return sorted(tag.tag_name for tag in self.tags)

    def set_tags(self, tag_names):
        """Replace the tag collection with the given names (blank and duplicate names dropped)"""
        wanted = []
        for name in tag_names or ():
            token = str(name).strip()
            if token and token not in wanted:
                wanted.append(token)
        existing = {tag.tag_name: tag for tag in self.tags}
        for name, tag in existing.items():
            if name not in wanted:
                self.tags.remove(tag)
        for name in wanted:
            if name not in existing:
                self.tags.append(DonorTag(tag_name=name))

    def to_dict(self, include_events=False):
        data = {"id": self.id}
        for field in DONOR_UPDATABLE_FIELDS:
            value = getattr(self, field)
            if field in DONOR_DATE_FIELDS and value is not None:
                value = value.isoformat()
            data[field] = value
        data["tags"] = self.get_tag_names()
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        if include_events:
            data["event_entries"] = [entry.to_dict() for entry in self.event_entries]
        return data


class DonorTag(BaseModel):
    """Free-form categorization tags for donors"""

    __tablename__ = "donor_tags"

    id = db.Column(db.Integer, primary_key=True)
    donor_id = db.Column(db.Integer, db.ForeignKey("donors.id", ondelete="CASCADE"), nullable=False)
    tag_name = db.Column(db.String(100), nullable=False)

    # Relationships
    donor = db.relationship("Donor", back_populates="tags")

    __table_args__ = (
        Index("idx_donor_tag", "tag_name"),
        db.UniqueConstraint("donor_id", "tag_name", name="_donor_tag_uc"),
    )

    def __repr__(self):
        return f"<DonorTag {self.tag_name}>"
