# donor_app/models/user.py

from enum import Enum as PyEnum

from flask import current_app
from flask_login import UserMixin
from sqlalchemy import Enum
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from .base import BaseModel, db


class UserRole(PyEnum):
    """Relationship-manager role of a staff account"""

    PMM = "pmm"
    SMM = "smm"
    VMM = "vmm"


class User(UserMixin, BaseModel):
    """Staff account that creates events and reviews donor lists"""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(Enum(UserRole, name="user_role_enum"), nullable=False, default=UserRole.PMM)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    last_login = db.Column(db.DateTime(timezone=True), nullable=True)

    # Relationships
    events = db.relationship("Event", back_populates="creator", foreign_keys="Event.created_by_user_id")

    def __repr__(self):
        return f"<User {self.email}>"

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value if self.role else None,
        }

    @staticmethod
    def find_by_email(email):
        """Find user by email with error handling"""
        try:
            return User.query.filter(db.func.lower(User.email) == (email or "").strip().lower()).first()
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by email {email}: {str(e)}")
            return None

    @staticmethod
    def find_by_id(user_id):
        """Find user by ID with error handling"""
        try:
            return db.session.get(User, user_id)
        except SQLAlchemyError as e:
            current_app.logger.error(f"Database error finding user by id {user_id}: {str(e)}")
            return None
