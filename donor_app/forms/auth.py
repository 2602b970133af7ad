# donor_app/forms/auth.py
"""
Forms for registration and login
"""

from wtforms import PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Email, Length
from wtforms.validators import ValidationError as FieldValidationError

from donor_app.models import User, UserRole

from .base import JSONForm


class RegistrationForm(JSONForm):
    """Payload for POST /api/users/register"""

    name = StringField(
        "Name",
        validators=[
            DataRequired(message="Name, email, password and role are required"),
            Length(max=120, message="Name must be less than 120 characters."),
        ],
    )
    email = StringField(
        "Email",
        validators=[
            DataRequired(message="Name, email, password and role are required"),
            Email(message="Invalid email address"),
            Length(max=120),
        ],
    )
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(message="Name, email, password and role are required"),
            Length(min=6, message="Password must be at least 6 characters long"),
        ],
    )
    role = SelectField(
        "Role",
        validators=[DataRequired(message="Name, email, password and role are required")],
        choices=[(role.value, role.value.upper()) for role in UserRole],
        validate_choice=False,
    )

    def validate_role(self, field):
        if str(field.data or "").lower() not in {role.value for role in UserRole}:
            raise FieldValidationError("Invalid role. Must be one of: pmm, smm, vmm")
        field.data = str(field.data).lower()

    def validate_email(self, field):
        if User.find_by_email(field.data):
            raise FieldValidationError("User already exists")


class LoginForm(JSONForm):
    """Payload for POST /api/users/login"""

    email = StringField("Email", validators=[DataRequired(message="Email and password are required")])
    password = PasswordField("Password", validators=[DataRequired(message="Email and password are required")])
