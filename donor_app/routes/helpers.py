# donor_app/routes/helpers.py
"""
Shared request helpers for API routes
"""

from flask import request

from donor_app.utils.errors import ValidationError


def json_body(required=True):
    """Return the JSON object body; a missing or non-object body is a 400 when ``required``"""
    data = request.get_json(silent=True)
    if data is None and not required:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON data")
    return data
