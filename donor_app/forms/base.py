# donor_app/forms/base.py
"""
Base form for JSON API payloads. Flask-WTF reads ``request.get_json()`` when
the request is JSON; CSRF is off because the API authenticates with bearer
tokens.
"""

from flask_wtf import FlaskForm

from donor_app.utils.errors import ValidationError


class JSONForm(FlaskForm):
    class Meta:
        csrf = False

    def first_error(self):
        for field_name, messages in self.errors.items():
            if messages:
                return messages[0]
        return "Invalid request"

    def validate_or_raise(self):
        """Run validators, raising ValidationError with the first message and all field errors"""
        if not self.validate():
            raise ValidationError(self.first_error(), details=self.errors)
        return self
