# donor_app/forms/__init__.py
"""
WTForms package
"""

from .auth import LoginForm, RegistrationForm
from .base import JSONForm
from .event import CreateEventForm

__all__ = [
    "JSONForm",
    "LoginForm",
    "RegistrationForm",
    "CreateEventForm",
]
