# donor_app/forms/event.py
"""
Forms for event management
"""

from wtforms import FloatField, IntegerField, StringField
from wtforms.validators import DataRequired, Length, NumberRange, Optional
from wtforms.validators import ValidationError as FieldValidationError

from donor_app.importer.parsing import parse_date

from .base import JSONForm

REQUIRED_MESSAGE = "Name, type, date, and location are required fields"


def _valid_date(form, field):
    if field.data not in (None, "") and parse_date(field.data) is None:
        raise FieldValidationError(f"{field.name} is not a valid date")


class CreateEventForm(JSONForm):
    """Payload for POST /api/events; coercion happens in the event service"""

    name = StringField(
        "Event Name",
        validators=[
            DataRequired(message=REQUIRED_MESSAGE),
            Length(max=200, message="Event name must be less than 200 characters."),
        ],
    )
    type = StringField("Type", validators=[DataRequired(message=REQUIRED_MESSAGE), Length(max=100)])
    date = StringField("Date", validators=[DataRequired(message=REQUIRED_MESSAGE), _valid_date])
    location = StringField("Location", validators=[DataRequired(message=REQUIRED_MESSAGE), Length(max=200)])
    capacity = IntegerField(
        "Capacity",
        validators=[Optional(), NumberRange(min=1, message="Capacity must be a positive integer")],
    )
    focus = StringField("Focus", validators=[Optional(), Length(max=200)])
    criteria_min_giving_level = FloatField(
        "Minimum Giving Level",
        validators=[Optional(), NumberRange(min=0, message="criteria_min_giving_level cannot be negative")],
    )
    timeline_list_generation_date = StringField("List Generation Date", validators=[Optional(), _valid_date])
    timeline_review_deadline = StringField("Review Deadline", validators=[Optional(), _valid_date])
    timeline_invitation_date = StringField("Invitation Date", validators=[Optional(), _valid_date])
