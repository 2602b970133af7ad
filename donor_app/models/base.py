# donor_app/models/base.py

from datetime import datetime, timezone

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

db = SQLAlchemy()


def utcnow():
    return datetime.now(timezone.utc)


class BaseModel(db.Model):
    """Abstract base model with timestamps and error-handled persistence helpers"""

    __abstract__ = True

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @classmethod
    def safe_create(cls, **kwargs):
        """
        Create and commit a new instance.

        Returns:
            tuple: (instance, None) on success, (None, error message) on failure
        """
        try:
            instance = cls(**kwargs)
            db.session.add(instance)
            db.session.commit()
            return instance, None
        except (SQLAlchemyError, ValueError) as e:
            db.session.rollback()
            current_app.logger.error(f"Error creating {cls.__name__}: {str(e)}")
            return None, str(e)

    def safe_update(self, **kwargs):
        """
        Apply attribute updates and commit.

        Returns:
            tuple: (True, None) on success, (False, error message) on failure
        """
        try:
            for key, value in kwargs.items():
                if hasattr(self, key):
                    setattr(self, key, value)
            db.session.commit()
            return True, None
        except (SQLAlchemyError, ValueError) as e:
            db.session.rollback()
            current_app.logger.error(f"Error updating {self.__class__.__name__} {getattr(self, 'id', None)}: {str(e)}")
            return False, str(e)
