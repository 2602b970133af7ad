# donor_app/routes/progress.py
"""
Progress polling routes for long-running operations
"""

from flask import jsonify
from flask_login import current_user, login_required

from donor_app.services.progress_tracker import get_progress_tracker
from donor_app.utils.errors import NotFoundError, PermissionDeniedError

# Polling clients read the timestamps under their camelCase names
CLIENT_TIMESTAMP_KEYS = {"start_time": "startTime", "last_updated": "lastUpdated"}


def client_operation(operation):
    return {CLIENT_TIMESTAMP_KEYS.get(key, key): value for key, value in operation.items()}


def register_progress_routes(app):
    """Register progress tracker routes"""

    @app.route("/api/progress/user/operations", methods=["GET"])
    @login_required
    def progress_user_operations():
        operations = get_progress_tracker().get_user_operations(current_user.id)
        return jsonify([client_operation(operation) for operation in operations])

    @app.route("/api/progress/<operation_id>", methods=["GET"])
    @login_required
    def progress_view(operation_id):
        operation = get_progress_tracker().get_progress(operation_id)
        if operation is None:
            raise NotFoundError("Operation not found")
        if operation["user_id"] != current_user.id:
            raise PermissionDeniedError("Not authorized to access this operation")
        return jsonify(
            {
                "success": True,
                "operationId": operation_id,
                "progress": operation["progress"],
                "status": operation["status"],
                "message": operation["message"],
                "result": operation["result"],
                "startTime": operation["start_time"],
                "lastUpdated": operation["last_updated"],
            }
        )

    @app.route("/api/progress/<operation_id>", methods=["DELETE"])
    @login_required
    def progress_cancel(operation_id):
        if not get_progress_tracker().cancel_operation(operation_id, current_user.id):
            raise NotFoundError("Operation not found or unauthorized to cancel")
        return jsonify({"message": "Operation cancelled successfully", "operationId": operation_id})
