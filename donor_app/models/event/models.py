# donor_app/models/event/models.py

from flask import current_app
from sqlalchemy import Enum, Index
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import validates

from ..base import BaseModel, db
from .enums import DonorReviewStatus, EventStatus, ListReviewStatus


def _iso(value):
    return value.isoformat() if value is not None else None


class Event(BaseModel):
    """Model for representing fundraising events"""

    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    type = db.Column(db.String(100), nullable=False, index=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    location = db.Column(db.String(200), nullable=False)
    capacity = db.Column(db.Integer, nullable=True)
    focus = db.Column(db.String(200), nullable=True)
    criteria_min_giving_level = db.Column(db.Float, default=0, nullable=False)

    # Timeline
    timeline_list_generation_date = db.Column(db.DateTime(timezone=True), nullable=True)
    timeline_review_deadline = db.Column(db.DateTime(timezone=True), nullable=True)
    timeline_invitation_date = db.Column(db.DateTime(timezone=True), nullable=True)

    status = db.Column(
        Enum(EventStatus, name="event_status_enum"),
        default=EventStatus.PLANNING,
        nullable=False,
        index=True,
    )
    is_deleted = db.Column(db.Boolean, default=False, nullable=False, index=True)

    # Foreign keys
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # Relationships
    creator = db.relationship("User", back_populates="events", foreign_keys=[created_by_user_id])
    donor_list = db.relationship(
        "EventDonorList",
        back_populates="event",
        uselist=False,
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_event_status_date", "status", "date"),)

    def __repr__(self):
        return f"<Event {self.name} ({self.status.value if self.status else None})>"

    @validates("capacity")
    def validate_capacity(self, key, value):
        """Capacity, when set, is a positive integer"""
        if value is not None and value < 1:
            raise ValueError("Capacity must be a positive integer")
        return value

    def to_dict(self, include_list=False):
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "date": _iso(self.date),
            "location": self.location,
            "capacity": self.capacity,
            "focus": self.focus,
            "criteria_min_giving_level": self.criteria_min_giving_level,
            "timeline_list_generation_date": _iso(self.timeline_list_generation_date),
            "timeline_review_deadline": _iso(self.timeline_review_deadline),
            "timeline_invitation_date": _iso(self.timeline_invitation_date),
            "status": self.status.value if self.status else None,
            "created_by": self.created_by_user_id,
            "creator": self.creator.to_dict() if self.creator else None,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
        if include_list and self.donor_list is not None:
            data["donor_list"] = self.donor_list.to_summary()
        return data

    @staticmethod
    def find_active(event_id):
        """Find a non-deleted event by ID with error handling"""
        try:
            event = db.session.get(Event, event_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding event by id {event_id}: {str(e)}")
            return None
        if event is None or event.is_deleted:
            return None
        return event


class EventDonorList(BaseModel):
    """Aggregate review statistics for one event's donor roster"""

    __tablename__ = "event_donor_lists"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id", ondelete="CASCADE"), nullable=False, unique=True)
    name = db.Column(db.String(200), nullable=False)
    generated_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    total_donors = db.Column(db.Integer, default=0, nullable=False)
    approved = db.Column(db.Integer, default=0, nullable=False)
    excluded = db.Column(db.Integer, default=0, nullable=False)
    pending = db.Column(db.Integer, default=0, nullable=False)
    auto_excluded = db.Column(db.Integer, default=0, nullable=False)
    review_status = db.Column(
        Enum(ListReviewStatus, name="list_review_status_enum"),
        default=ListReviewStatus.COMPLETED,
        nullable=False,
        index=True,
    )

    # Relationships
    event = db.relationship("Event", back_populates="donor_list")
    generator = db.relationship("User", foreign_keys=[generated_by])
    entries = db.relationship("EventDonor", back_populates="donor_list", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<EventDonorList event={self.event_id} total={self.total_donors}>"

    def status_counts(self):
        return {
            DonorReviewStatus.PENDING: self.pending or 0,
            DonorReviewStatus.APPROVED: self.approved or 0,
            DonorReviewStatus.EXCLUDED: self.excluded or 0,
            DonorReviewStatus.AUTO_EXCLUDED: self.auto_excluded or 0,
        }

    def is_consistent(self):
        """Bucket counters sum to the total and the review status follows the pending count"""
        buckets_match = sum(self.status_counts().values()) == (self.total_donors or 0)
        expected_status = ListReviewStatus.COMPLETED if not self.pending else ListReviewStatus.PENDING
        return buckets_match and self.review_status == expected_status

    def to_summary(self):
        return {
            "id": self.id,
            "event_id": self.event_id,
            "name": self.name,
            "total_donors": self.total_donors,
            "approved": self.approved,
            "excluded": self.excluded,
            "pending": self.pending,
            "auto_excluded": self.auto_excluded,
            "review_status": self.review_status.value if self.review_status else None,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "generated_by": self.generated_by,
        }

    def to_dict(self):
        data = self.to_summary()
        data["donors"] = [entry.to_dict() for entry in self.entries]
        return data


class EventDonor(BaseModel):
    """One donor's participation and review record on an event donor list"""

    __tablename__ = "event_donors"

    id = db.Column(db.Integer, primary_key=True)
    donor_list_id = db.Column(
        db.Integer, db.ForeignKey("event_donor_lists.id", ondelete="CASCADE"), nullable=False
    )
    donor_id = db.Column(db.Integer, db.ForeignKey("donors.id", ondelete="CASCADE"), nullable=False)
    status = db.Column(
        Enum(DonorReviewStatus, name="donor_review_status_enum"),
        default=DonorReviewStatus.PENDING,
        nullable=False,
        index=True,
    )
    exclude_reason = db.Column(db.Text, nullable=True)
    reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    review_date = db.Column(db.DateTime(timezone=True), nullable=True)
    comments = db.Column(db.Text, nullable=True)
    auto_excluded = db.Column(db.Boolean, default=False, nullable=False)

    # Relationships
    donor_list = db.relationship("EventDonorList", back_populates="entries")
    donor = db.relationship("Donor", back_populates="event_entries")
    reviewer = db.relationship("User", foreign_keys=[reviewer_id])

    __table_args__ = (
        Index("idx_event_donor_status", "donor_list_id", "status"),
        db.UniqueConstraint("donor_list_id", "donor_id", name="_event_donor_uc"),
    )

    def __repr__(self):
        return f"<EventDonor list={self.donor_list_id} donor={self.donor_id} status={self.status.value}>"

    def to_dict(self):
        return {
            "id": self.id,
            "donor_list_id": self.donor_list_id,
            "donor_id": self.donor_id,
            "name": self.donor.get_display_name() if self.donor else None,
            "status": self.status.value if self.status else None,
            "exclude_reason": self.exclude_reason,
            "reviewer_id": self.reviewer_id,
            "review_date": _iso(self.review_date),
            "comments": self.comments,
            "auto_excluded": self.auto_excluded,
        }
