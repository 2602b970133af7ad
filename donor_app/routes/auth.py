# donor_app/routes/auth.py
"""
User registration, login and logout routes
"""

from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from donor_app.forms import LoginForm, RegistrationForm
from donor_app.models import User, UserRole, db
from donor_app.models.base import utcnow
from donor_app.utils.auth import generate_auth_token
from donor_app.utils.errors import NotFoundError, ValidationError
from donor_app.utils.query_params import parse_id


def register_auth_routes(app):
    """Register user account routes"""

    @app.route("/api/users/register", methods=["POST"])
    def register_user():
        form = RegistrationForm()
        form.validate_or_raise()

        user = User(
            name=form.name.data.strip(),
            email=form.email.data.strip().lower(),
            role=UserRole(form.role.data),
        )
        user.set_password(form.password.data)
        db.session.add(user)
        db.session.commit()
        current_app.logger.info(f"Registered user {user.id} ({user.email})")
        return jsonify({"message": "User registered successfully", "user": user.to_dict()}), 201

    @app.route("/api/users/login", methods=["POST"])
    def login():
        form = LoginForm()
        form.validate_or_raise()

        user = User.find_by_email(form.email.data)
        if user is None or not user.check_password(form.password.data):
            current_app.logger.info(f"Failed login attempt for {form.email.data}")
            raise ValidationError("Invalid credentials")
        if not user.is_active:
            raise ValidationError("Account is disabled")

        user.last_login = utcnow()
        db.session.commit()
        login_user(user)
        current_app.logger.info(f"User {user.id} logged in")
        return jsonify({"message": "Login successful", "token": generate_auth_token(user), "user": user.to_dict()})

    @app.route("/api/users/logout", methods=["POST"])
    @login_required
    def logout():
        current_app.logger.info(f"User {current_user.id} logged out")
        logout_user()
        return jsonify({"message": "Logged out successfully"})

    @app.route("/api/users/<user_id>", methods=["GET"])
    @login_required
    def get_user(user_id):
        user = User.find_by_id(parse_id(user_id, "user ID"))
        if user is None:
            raise NotFoundError("User not found")
        return jsonify(user.to_dict())
