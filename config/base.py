# config/base.py
import os
from datetime import timedelta


def _coerce_bool(value, default=False):
    """Convert environment-style truthy/falsey values to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_int(value, default, *, minimum=0):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, number)


def _parse_extension_list(value):
    """
    Parse a comma-separated extension list while keeping order and removing duplicates.

    Returns:
        tuple[str, ...]: Lower-case extensions without leading dots.
    """
    if not value:
        return ()

    seen = set()
    extensions = []
    for raw_item in value.split(","):
        item = raw_item.strip().lower().lstrip(".")
        if not item or item in seen:
            continue
        seen.add(item)
        extensions.append(item)
    return tuple(extensions)


_config_dir = os.path.dirname(os.path.abspath(__file__))
_project_root = os.path.dirname(_config_dir)
INSTANCE_PATH = os.path.join(_project_root, "instance")


class Config:
    # SECRET_KEY must be set via environment variable in production
    # Generate with: python -c "import secrets; print(secrets.token_hex(32))"
    _flask_env = os.environ.get("FLASK_ENV", "development")
    _is_testing = _flask_env == "testing"
    _is_production = _flask_env == "production"

    SECRET_KEY = os.environ.get("SECRET_KEY")

    if not SECRET_KEY and _is_production:
        raise ValueError(
            "SECRET_KEY environment variable is required in production. "
            'Generate with: python -c "import secrets; print(secrets.token_hex(32))"'
        )

    if not SECRET_KEY and not _is_testing:
        import warnings

        warnings.warn(
            "SECRET_KEY not set. Using default for development only. "
            "Set SECRET_KEY environment variable before deploying.",
            UserWarning,
        )
        SECRET_KEY = "dev-secret-key-change-in-production"

    if not SECRET_KEY:
        SECRET_KEY = "test-secret-key-placeholder"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Bearer tokens issued at login
    AUTH_TOKEN_MAX_AGE_SECONDS = _coerce_int(os.environ.get("AUTH_TOKEN_MAX_AGE_SECONDS"), 86400, minimum=60)

    # Donor importer configuration
    IMPORTER_UPLOAD_DIR = os.environ.get("IMPORTER_UPLOAD_DIR", os.path.join(INSTANCE_PATH, "import_uploads"))
    IMPORTER_MAX_UPLOAD_MB = _coerce_int(os.environ.get("IMPORTER_MAX_UPLOAD_MB"), 25, minimum=1)
    IMPORTER_ALLOWED_EXTENSIONS = _parse_extension_list(
        os.environ.get("IMPORTER_ALLOWED_EXTENSIONS", "csv,xlsx")
    ) or ("csv", "xlsx")
    IMPORTER_RUN_IN_BACKGROUND = _coerce_bool(os.environ.get("IMPORTER_RUN_IN_BACKGROUND"), default=True)
    IMPORTER_PROGRESS_INTERVAL = _coerce_int(os.environ.get("IMPORTER_PROGRESS_INTERVAL"), 10, minimum=1)

    # Progress tracker retention
    PROGRESS_COMPLETED_TTL_SECONDS = _coerce_int(os.environ.get("PROGRESS_COMPLETED_TTL_SECONDS"), 1800)
    PROGRESS_CANCELLED_TTL_SECONDS = _coerce_int(os.environ.get("PROGRESS_CANCELLED_TTL_SECONDS"), 600)
    PROGRESS_STALE_SECONDS = _coerce_int(os.environ.get("PROGRESS_STALE_SECONDS"), 600)
    PROGRESS_SWEEP_INTERVAL_SECONDS = _coerce_int(os.environ.get("PROGRESS_SWEEP_INTERVAL_SECONDS"), 600)

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"

    # JSON API; forms validate request bodies without CSRF tokens
    WTF_CSRF_ENABLED = False


class DevelopmentConfig(Config):
    DEBUG = True

    if not os.path.exists(INSTANCE_PATH):
        os.makedirs(INSTANCE_PATH, exist_ok=True)

    # SQLite URI format: sqlite:///absolute/path (3 slashes for absolute path)
    db_path_normalized = os.path.join(INSTANCE_PATH, "donor_app_dev.db").replace("\\", "/")
    db_uri = f"sqlite:///{db_path_normalized}"

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", db_uri)
    SQLALCHEMY_ECHO = _coerce_bool(os.environ.get("SQLALCHEMY_ECHO"), default=False)
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": 5,
            }
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {}


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get("SECRET_KEY", "test-secret-key-for-testing-only")
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": 5,
        }
    }
    IMPORTER_RUN_IN_BACKGROUND = False
    PROGRESS_SWEEP_INTERVAL_SECONDS = 0


class ProductionConfig(Config):
    DEBUG = False
    uri = os.environ.get("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_ECHO = False
    SESSION_COOKIE_SECURE = True
