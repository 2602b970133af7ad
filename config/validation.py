# config/validation.py

"""
Startup validation of the environment for the donor management service.

Production refuses to boot without a real SECRET_KEY and a DATABASE_URL.
Numeric and list settings are checked in every environment when they are set,
since a typo there silently falls back to a default otherwise.
"""

import os
import sys
from typing import List, Tuple

PLACEHOLDER_SECRET_KEYS = {"your-secret-key", "your_secret_key", "dev-secret-key-change-in-production"}

POSITIVE_INT_SETTINGS = (
    "AUTH_TOKEN_MAX_AGE_SECONDS",
    "IMPORTER_MAX_UPLOAD_MB",
    "IMPORTER_PROGRESS_INTERVAL",
    "PROGRESS_COMPLETED_TTL_SECONDS",
    "PROGRESS_CANCELLED_TTL_SECONDS",
    "PROGRESS_STALE_SECONDS",
)


def _production_errors(environ) -> List[str]:
    errors = []
    secret_key = environ.get("SECRET_KEY", "")
    if not secret_key or secret_key in PLACEHOLDER_SECRET_KEYS:
        errors.append(
            "SECRET_KEY is required in production and must not be the default value. "
            'Generate a secure key: python -c "import secrets; print(secrets.token_hex(32))"'
        )
    if not environ.get("DATABASE_URL"):
        errors.append("DATABASE_URL is required in production. Set it to your PostgreSQL connection string.")
    return errors


def _setting_errors(environ) -> List[str]:
    errors = []
    for name in POSITIVE_INT_SETTINGS:
        raw = environ.get(name)
        if raw is None:
            continue
        try:
            valid = int(raw) > 0
        except ValueError:
            valid = False
        if not valid:
            errors.append(f"{name} must be a positive integer (got {raw!r})")

    extensions = environ.get("IMPORTER_ALLOWED_EXTENSIONS")
    if extensions is not None and not [item for item in extensions.split(",") if item.strip()]:
        errors.append("IMPORTER_ALLOWED_EXTENSIONS must list at least one extension when set")
    return errors


def validate_environment(flask_env: str = None) -> Tuple[bool, List[str]]:
    """
    Validate environment variables for ``flask_env``.

    Args:
        flask_env: development, production or testing; defaults to FLASK_ENV

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if flask_env is None:
        flask_env = os.environ.get("FLASK_ENV", "development")

    errors = []
    if flask_env == "production":
        errors.extend(_production_errors(os.environ))
    errors.extend(_setting_errors(os.environ))
    return not errors, errors


def validate_and_exit(flask_env: str = None) -> None:
    """Print every problem found and exit with status 1 when validation fails."""
    is_valid, errors = validate_environment(flask_env)
    if is_valid:
        return

    lines = ["ENVIRONMENT VALIDATION FAILED", ""]
    lines.extend(f"{i}. {error}" for i, error in enumerate(errors, 1))
    lines.extend(["", "Check your .env file or environment variables."])
    print("\n".join(lines), file=sys.stderr)
    sys.exit(1)
