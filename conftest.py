# conftest.py

import os
import tempfile
from unittest.mock import patch

import pytest
from flask import g
from flask.testing import FlaskClient

# Set testing environment BEFORE importing app so app.py picks TestingConfig
os.environ["FLASK_ENV"] = "testing"

from app import app as flask_app  # noqa: E402
from donor_app.models import Donor, Event, EventDonorList, ListReviewStatus, User, UserRole, db  # noqa: E402
from donor_app.services.progress_tracker import (  # noqa: E402
    PROGRESS_EXTENSION_KEY,
    ProgressTracker,
    ProgressTrackerSettings,
)
from donor_app.utils.auth import generate_auth_token  # noqa: E402


@pytest.fixture(scope="function")
def app(tmp_path):
    """Create and configure a test Flask application"""
    import uuid

    # Create a unique temporary database file for each test
    db_fd, temp_db = tempfile.mkstemp(suffix=f"_{uuid.uuid4().hex[:8]}.db")
    upload_dir = tmp_path / "uploads"

    try:
        flask_app.config.update(
            {
                "TESTING": True,
                "WTF_CSRF_ENABLED": False,
                "SQLALCHEMY_DATABASE_URI": f"sqlite:///{temp_db}",
                "SECRET_KEY": "test-secret-key-for-testing-only",
                "MONITORING_ENABLED": False,
                "ENABLE_FILE_LOGGING": False,
                "ENABLE_CONSOLE_LOGGING": False,
                "LOG_LEVEL": "DEBUG",
                "IMPORTER_RUN_IN_BACKGROUND": False,
                "IMPORTER_UPLOAD_DIR": str(upload_dir),
                "IMPORTER_ALLOWED_EXTENSIONS": ("csv", "xlsx"),
                "IMPORTER_PROGRESS_INTERVAL": 10,
            }
        )
        flask_app.extensions["importer"].update(
            {
                "allowed_extensions": ("csv", "xlsx"),
                "run_in_background": False,
                "upload_dir": str(upload_dir),
            }
        )
        # Fresh in-memory tracker per test, without timers or a sweeper
        flask_app.extensions[PROGRESS_EXTENSION_KEY] = ProgressTracker(
            ProgressTrackerSettings.from_config(flask_app.config),
            use_timers=False,
        )

        with flask_app.app_context():
            # Drop any existing tables to ensure clean state
            db.drop_all()
            db.create_all()
            yield flask_app
            db.session.remove()
            db.drop_all()
    finally:
        # Always close and remove the temporary database file, even on error
        try:
            os.close(db_fd)
        except OSError:
            pass
        try:
            if os.path.exists(temp_db):
                os.unlink(temp_db)
        except OSError:
            pass


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


class FreshUserClient(FlaskClient):
    """Test client that re-resolves the current user on every request

    Requests reuse the fixture app context, so Flask-Login would otherwise
    keep the user cached on ``g`` from the previous request.
    """

    def open(self, *args, **kwargs):
        g.pop("_login_user", None)
        return super().open(*args, **kwargs)


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    app.test_client_class = FreshUserClient
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def tracker(app):
    return app.extensions[PROGRESS_EXTENSION_KEY]


@pytest.fixture
def test_user(app):
    """Persisted PMM staff account"""
    user = User(name="Test User", email="test@example.com", role=UserRole.PMM, is_active=True)
    user.set_password("testpass123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def other_user(app):
    user = User(name="Other User", email="other@example.com", role=UserRole.SMM, is_active=True)
    user.set_password("otherpass123")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def auth_headers(app, test_user):
    """Bearer-token headers for ``test_user``"""
    return {"Authorization": f"Bearer {generate_auth_token(test_user, app)}"}


@pytest.fixture
def other_auth_headers(app, other_user):
    return {"Authorization": f"Bearer {generate_auth_token(other_user, app)}"}


@pytest.fixture
def make_donor(app):
    """Factory creating committed donors"""

    def _make(**fields):
        donor = Donor(**fields)
        db.session.add(donor)
        db.session.commit()
        return donor

    return _make


@pytest.fixture
def test_event(app, test_user):
    """Event with an empty, completed donor list"""
    from datetime import datetime, timezone

    event = Event(
        name="Spring Gala",
        type="Gala",
        date=datetime(2026, 5, 1, 18, 0, tzinfo=timezone.utc),
        location="Union Station",
        capacity=150,
        created_by_user_id=test_user.id,
    )
    event.donor_list = EventDonorList(
        name="Spring Gala",
        generated_by=test_user.id,
        review_status=ListReviewStatus.COMPLETED,
    )
    db.session.add(event)
    db.session.commit()
    return event


@pytest.fixture
def donor_list(test_event):
    return test_event.donor_list


@pytest.fixture
def mock_logger():
    """Mock app logger for testing"""
    with patch.object(flask_app, "logger") as mock_log:
        yield mock_log


def pytest_configure(config):
    """Configure pytest with custom markers and ensure testing environment"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers"""
    for item in items:
        if "integration" in item.nodeid or "/routes/" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
