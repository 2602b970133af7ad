# donor_app/routes/__init__.py
"""
Application routes package
"""

from .auth import register_auth_routes
from .donor import register_donor_routes
from .donor_list import register_donor_list_routes
from .event import register_event_routes
from .progress import register_progress_routes


def init_routes(app):
    """Initialize all application routes"""
    register_auth_routes(app)
    register_donor_routes(app)
    register_event_routes(app)
    register_donor_list_routes(app)
    register_progress_routes(app)
