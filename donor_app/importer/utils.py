"""
Importer-specific utilities for handling uploaded files and cleanup.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable
from uuid import uuid4

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

DEFAULT_UPLOAD_SUBDIR = "import_uploads"
DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = ("csv", "xlsx")


def _normalize_upload_dir(
    configured_path: str | None,
    instance_path: str,
    *,
    default_subdir: str,
) -> Path:
    if not configured_path:
        return Path(instance_path) / default_subdir

    candidate = Path(configured_path)
    if candidate.is_absolute():
        return candidate

    return Path(instance_path) / candidate


def resolve_upload_directory(app) -> Path:
    """
    Determine and create (if necessary) the importer upload directory.
    """

    upload_dir = _normalize_upload_dir(
        app.config.get("IMPORTER_UPLOAD_DIR"),
        app.instance_path,
        default_subdir=DEFAULT_UPLOAD_SUBDIR,
    )
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


def get_allowed_extensions(app) -> tuple[str, ...]:
    configured = app.config.get("IMPORTER_ALLOWED_EXTENSIONS") or DEFAULT_ALLOWED_EXTENSIONS
    if isinstance(configured, str):
        configured = configured.split(",")
    return tuple(ext.strip().lower().lstrip(".") for ext in configured if ext and ext.strip())


def file_extension(filename: str | None) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def allowed_file(filename: str, allowed_extensions: Iterable[str] = DEFAULT_ALLOWED_EXTENSIONS) -> bool:
    """
    Validate the uploaded filename extension against the allowed set.
    """

    extension = file_extension(filename)
    if not extension:
        return False
    return extension in {ext.lower() for ext in allowed_extensions}


def persist_upload(file_storage: FileStorage, app) -> Path:
    """
    Persist the uploaded file to disk and return the fully-qualified path.

    Files are stored under ``resolve_upload_directory(app)`` using a UUID-based
    filename; the original extension is kept so the adapter can be chosen.
    """

    upload_dir = resolve_upload_directory(app)
    original_name = secure_filename(file_storage.filename or "")
    extension = Path(original_name).suffix.lower() if original_name else ""

    target_path = upload_dir / f"{uuid4().hex}{extension}"
    file_storage.save(target_path)
    current_app.logger.debug("Importer upload persisted to %s", target_path)
    return target_path


def cleanup_upload(path: Path | str | None) -> None:
    """
    Remove a stored upload, logging but ignoring filesystem errors.
    """

    if path is None:
        return
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        current_app.logger.warning("Failed to remove importer upload %s: %s", path, exc)
