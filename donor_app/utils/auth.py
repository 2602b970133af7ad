# donor_app/utils/auth.py
"""
Bearer-token authentication for the JSON API.

Tokens are itsdangerous signed payloads carrying the user id and role, signed
with the app ``SECRET_KEY`` and valid for ``AUTH_TOKEN_MAX_AGE_SECONDS``.
Flask-Login resolves the current user from the ``Authorization: Bearer``
header, falling back to the session cookie set at login.
"""

from flask import current_app, jsonify
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from donor_app.models import User, db
from donor_app.utils.errors import AuthenticationError

TOKEN_SALT = "donor-app-auth-token"
DEFAULT_TOKEN_MAX_AGE = 24 * 60 * 60


def _serializer(app=None):
    app = app or current_app
    return URLSafeTimedSerializer(app.config["SECRET_KEY"], salt=TOKEN_SALT)


def generate_auth_token(user, app=None):
    return _serializer(app).dumps({"user_id": user.id, "role": user.role.value if user.role else None})


def verify_auth_token(token, app=None):
    """Return the user for a valid token, else None"""
    app = app or current_app
    max_age = int(app.config.get("AUTH_TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE))
    try:
        payload = _serializer(app).loads(token, max_age=max_age)
    except SignatureExpired:
        app.logger.info("Rejected expired auth token")
        return None
    except BadSignature:
        return None
    user_id = payload.get("user_id") if isinstance(payload, dict) else None
    if user_id is None:
        return None
    user = db.session.get(User, int(user_id))
    if user is None or not user.is_active:
        return None
    return user


def extract_bearer_token(request):
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def init_auth(login_manager):
    """Install the bearer-token request loader and JSON 401 response"""

    @login_manager.request_loader
    def load_user_from_request(request):
        token = extract_bearer_token(request)
        if token is None:
            return None
        return verify_auth_token(token)

    @login_manager.unauthorized_handler
    def unauthorized():
        error = AuthenticationError()
        return jsonify(error.to_dict()), error.status_code
