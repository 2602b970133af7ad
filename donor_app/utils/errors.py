# donor_app/utils/errors.py
"""
API error hierarchy. Raised by services and converted to JSON responses by
``donor_app.utils.error_handler``.
"""


class APIError(Exception):
    """Base class for errors reported to API clients"""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, *, details=None, status_code=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        payload = {"success": False, "message": self.message, "error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(APIError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(APIError):
    status_code = 401
    default_message = "Not authorized, no token"


class PermissionDeniedError(APIError):
    status_code = 403
    default_message = "Not authorized to access this resource"


class NotFoundError(APIError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(APIError):
    status_code = 409
    default_message = "Resource already exists"
