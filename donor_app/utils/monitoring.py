# donor_app/utils/monitoring.py
"""Health check and Prometheus metrics endpoints"""

from datetime import datetime, timezone

from flask import Response, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from donor_app.models import db


class HealthChecker:
    """Reports application liveness and database reachability"""

    def __init__(self, app=None):
        self.app = app

    def basic_health_check(self):
        timestamp = datetime.now(timezone.utc).isoformat()
        try:
            db.session.execute(text("SELECT 1"))
        except (SQLAlchemyError, ValueError) as e:
            db.session.rollback()
            if self.app is not None:
                self.app.logger.error(f"Health check database error: {str(e)}")
            return (
                jsonify({"status": "unhealthy", "database": "unreachable", "error": str(e), "timestamp": timestamp}),
                503,
            )
        return jsonify({"status": "ok", "database": "ok", "timestamp": timestamp}), 200


def init_monitoring(app):
    checker = HealthChecker(app)
    endpoint = app.config.get("HEALTH_CHECK_ENDPOINT", "/health")

    @app.route(endpoint, methods=["GET"])
    def health_check():
        return checker.basic_health_check()

    if app.config.get("MONITORING_ENABLED", False):

        @app.route(app.config.get("METRICS_ENDPOINT", "/metrics"), methods=["GET"])
        def metrics():
            return Response(generate_latest(), content_type=CONTENT_TYPE_LATEST)

    app.extensions["health_checker"] = checker
    return checker
