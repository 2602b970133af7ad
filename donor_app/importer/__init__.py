"""
Donor importer package.

Wires the progress tracker, upload directory and CLI commands into the app and
records importer state in ``app.extensions['importer']``.
"""

from __future__ import annotations

from flask import Flask

from donor_app.services.progress_tracker import init_progress_tracker

from .adapters import get_supported_extensions
from .cli import register_cli
from .tasks import DONOR_IMPORT_OPERATION, dispatch_donor_import, run_donor_import
from .utils import get_allowed_extensions, resolve_upload_directory

IMPORTER_EXTENSION_KEY = "importer"

__all__ = [
    "init_importer",
    "IMPORTER_EXTENSION_KEY",
    "DONOR_IMPORT_OPERATION",
    "dispatch_donor_import",
    "run_donor_import",
    "get_importer_allowed_extensions",
]


def init_importer(app: Flask) -> None:
    """
    Set up importer state, the progress tracker and CLI commands.

    Extensions listed in ``IMPORTER_ALLOWED_EXTENSIONS`` without a matching
    adapter are dropped with a warning.
    """
    supported = set(get_supported_extensions())
    configured = get_allowed_extensions(app)
    unsupported = [ext for ext in configured if ext not in supported]
    if unsupported:
        app.logger.warning("Ignoring importer extensions without an adapter: %s", ", ".join(unsupported))

    state = app.extensions.setdefault(IMPORTER_EXTENSION_KEY, {})
    state.update(
        {
            "allowed_extensions": tuple(ext for ext in configured if ext in supported),
            "run_in_background": bool(app.config.get("IMPORTER_RUN_IN_BACKGROUND", True)),
            "upload_dir": str(resolve_upload_directory(app)),
        }
    )
    init_progress_tracker(app)
    register_cli(app)
    app.logger.info("Importer ready for extensions: %s", ", ".join(state["allowed_extensions"]) or "none")


def get_importer_allowed_extensions(app: Flask) -> tuple[str, ...]:
    state = app.extensions.get(IMPORTER_EXTENSION_KEY) or {}
    return tuple(state.get("allowed_extensions") or get_allowed_extensions(app))
